"""Exports for script domain"""

from .envelope import OperationEnvelope, build_envelope, compute_parameter_hash
from .models import (
    ApprovalState,
    DispatchReceipt,
    ExecutionTarget,
    ParameterSchema,
    ParameterSpec,
    ScriptDefinition,
    ScriptSummary,
    ScriptType,
)
from .parameters import ParameterBlock, ParameterValue, encode_parameters
from .schema import decode_parameter_schema

__all__ = [
    "ApprovalState",
    "DispatchReceipt",
    "ExecutionTarget",
    "OperationEnvelope",
    "ParameterBlock",
    "ParameterSchema",
    "ParameterSpec",
    "ParameterValue",
    "ScriptDefinition",
    "ScriptSummary",
    "ScriptType",
    "build_envelope",
    "compute_parameter_hash",
    "decode_parameter_schema",
    "encode_parameters",
]
