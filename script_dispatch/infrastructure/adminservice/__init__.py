"""AdminService REST adapters."""

from .client import AdminServiceClient, odata_literal
from .repositories import (
    AdminServiceEndpointRepository,
    AdminServiceOperationRepository,
    AdminServiceScriptRepository,
    extract_operation_id,
)

__all__ = [
    "AdminServiceClient",
    "AdminServiceEndpointRepository",
    "AdminServiceOperationRepository",
    "AdminServiceScriptRepository",
    "extract_operation_id",
    "odata_literal",
]
