"""Exports for operation status domain"""

from .models import (
    ClientResult,
    ExecutionState,
    OperationFilter,
    OperationRecord,
    OperationStatus,
    OperationStatusView,
)
from .output import decode_output

__all__ = [
    "ClientResult",
    "ExecutionState",
    "OperationFilter",
    "OperationRecord",
    "OperationStatus",
    "OperationStatusView",
    "decode_output",
]
