"""Shared abstractions used across domain modules."""

from .exceptions import (
    DispatchError,
    FormatError,
    IntegrityUnavailableError,
    InvalidParameterValueError,
    MissingParameterError,
    NotFoundError,
    ScriptNotApprovedError,
    TransportError,
    ValidationError,
)

__all__ = [
    "DispatchError",
    "FormatError",
    "IntegrityUnavailableError",
    "InvalidParameterValueError",
    "MissingParameterError",
    "NotFoundError",
    "ScriptNotApprovedError",
    "TransportError",
    "ValidationError",
]
