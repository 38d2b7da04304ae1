"""Domain representations for scripts and their parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional


class ScriptType(IntEnum):
    POWERSHELL = 0


class ApprovalState(str, Enum):
    UNAPPROVED = "unapproved"
    PENDING = "pending"
    APPROVED = "approved"
    DISABLED = "disabled"

    @classmethod
    def from_code(cls, code: int | None) -> "ApprovalState":
        """Map the backend's numeric approval state; unknown codes are unapproved."""
        return _APPROVAL_CODES.get(code, cls.UNAPPROVED)


_APPROVAL_CODES = {
    0: ApprovalState.PENDING,
    1: ApprovalState.UNAPPROVED,
    2: ApprovalState.DISABLED,
    3: ApprovalState.APPROVED,
}


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    name: str
    data_type: str = "System.String"
    required: bool = False
    hidden: bool = False
    default_value: str = ""
    description: Optional[str] = None


# An absent schema is ``None``; an empty tuple is a script with zero parameters.
ParameterSchema = tuple[ParameterSpec, ...]


@dataclass(slots=True)
class ScriptDefinition:
    script_guid: str
    script_name: str
    script_version: str
    script_type: ScriptType
    approval_state: ApprovalState
    script_hash: Optional[str] = None
    hash_algorithm: str = "SHA256"
    schema: Optional[ParameterSchema] = None
    author: Optional[str] = None
    last_update_time: Optional[datetime] = None

    @property
    def is_approved(self) -> bool:
        return self.approval_state is ApprovalState.APPROVED

    @property
    def has_hash(self) -> bool:
        return bool(self.script_hash)


@dataclass(frozen=True, slots=True)
class ScriptSummary:
    script_guid: str
    script_name: str
    script_version: str
    approval_state: ApprovalState
    author: Optional[str] = None
    last_update_time: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class ExecutionTarget:
    """Where an operation is sent: a collection, explicit endpoints, or both."""

    collection_id: str = ""
    resource_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.collection_id and not self.resource_ids


@dataclass(frozen=True, slots=True)
class DispatchReceipt:
    operation_id: int
    script_guid: str
    script_name: str
    script_version: str
    target: ExecutionTarget
    parameter_group_id: str
    parameter_hash: str
    dispatched_at: datetime
