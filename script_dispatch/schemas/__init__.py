"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from script_dispatch.modules.operations.models import OperationStatus
from script_dispatch.modules.scripts.models import ApprovalState


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    username: str
    role: str


class ParameterSpecResponse(BaseModel):
    name: str
    data_type: str
    required: bool
    hidden: bool
    default_value: str
    description: Optional[str] = None


class ScriptSummaryResponse(BaseModel):
    script_guid: str
    script_name: str
    script_version: str
    approval_state: ApprovalState
    author: Optional[str] = None
    last_update_time: Optional[datetime] = None


class ScriptListResponse(BaseModel):
    total: int
    scripts: list[ScriptSummaryResponse]


class ScriptDetailResponse(ScriptSummaryResponse):
    script_type: int
    has_hash: bool
    hash_algorithm: str
    has_schema: bool = Field(..., description="False when the backend exposes no parameter definition")
    parameters: list[ParameterSpecResponse] = Field(default_factory=list)


class ScriptRunRequest(BaseModel):
    script: Optional[str] = Field(default=None, description="Script GUID or name")
    script_guid: Optional[str] = None
    script_name: Optional[str] = None
    collection_id: str = Field(default="", description="Empty string targets explicit endpoints only")
    resource_ids: list[int] = Field(default_factory=list)
    device_names: list[str] = Field(default_factory=list)
    parameters: dict[str, Any] = Field(default_factory=dict)


class ScriptRunResponse(BaseModel):
    operation_id: int
    script_guid: str
    script_name: str
    script_version: str
    collection_id: str
    resource_ids: list[int]
    parameter_group_id: str
    parameter_hash: str
    dispatched_at: datetime


class ClientResultResponse(BaseModel):
    resource_id: int
    device_name: Optional[str] = None
    execution_state: Optional[int] = None
    state_name: str
    exit_code: Optional[int] = None
    output: Optional[str] = None
    decoded_output: Any = None


class OperationStatusResponse(BaseModel):
    operation_id: Optional[int] = None
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
    results: list[ClientResultResponse] = Field(default_factory=list)
    error: Optional[str] = None


class OperationStatusListResponse(BaseModel):
    operations: list[OperationStatusResponse]


class JournalEntryResponse(BaseModel):
    id: str
    operation_id: int
    script_guid: str
    script_name: str
    script_version: Optional[str] = None
    collection_id: Optional[str] = None
    resource_ids: list[int] = Field(default_factory=list)
    parameter_hash: Optional[str] = None
    operator: Optional[str] = None
    dispatched_at: datetime


class JournalListResponse(BaseModel):
    entries: list[JournalEntryResponse]


class OperationDetailResponse(OperationStatusResponse):
    dispatch: Optional[JournalEntryResponse] = None
