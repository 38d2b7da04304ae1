"""Domain representations for dispatched operations and their results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Optional

RUN_SCRIPT_OPERATION_TYPE = 135


class ExecutionState(IntEnum):
    SUCCEEDED = 0
    FAILED = 1


class OperationStatus(str, Enum):
    NO_CLIENT_COMPLETED = "no_client_completed"
    SOME_CLIENTS_COMPLETED = "some_clients_completed"
    ALL_CLIENTS_COMPLETED = "all_clients_completed"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class OperationFilter:
    operation_id: Optional[int] = None
    collection_id: Optional[str] = None
    script_name: Optional[str] = None


@dataclass(slots=True)
class OperationRecord:
    operation_id: int
    script_guid: Optional[str]
    script_name: Optional[str]
    collection_id: Optional[str]
    collection_name: Optional[str]
    total_clients: int = 0
    completed_clients: int = 0
    failed_clients: int = 0
    offline_clients: int = 0
    not_applicable_clients: int = 0
    unknown_clients: int = 0
    last_update_time: Optional[datetime] = None


@dataclass(slots=True)
class ClientResult:
    resource_id: int
    device_name: Optional[str]
    execution_state: Optional[int]
    exit_code: Optional[int]
    output: Optional[str]
    decoded_output: Any = None

    @property
    def state_name(self) -> str:
        if self.execution_state is None:
            return "unknown"
        try:
            return ExecutionState(self.execution_state).name.lower()
        except ValueError:
            return "unknown"


@dataclass(slots=True)
class OperationStatusView:
    """One consolidated status record per operation."""

    operation_id: Optional[int]
    status: OperationStatus
    script_guid: Optional[str] = None
    script_name: Optional[str] = None
    collection_id: Optional[str] = None
    collection_name: Optional[str] = None
    total_clients: Optional[int] = None
    completed_clients: Optional[int] = None
    failed_clients: Optional[int] = None
    offline_clients: Optional[int] = None
    not_applicable_clients: Optional[int] = None
    unknown_clients: Optional[int] = None
    last_update_time: Optional[datetime] = None
    results: list[ClientResult] = field(default_factory=list)
    error: Optional[str] = None
