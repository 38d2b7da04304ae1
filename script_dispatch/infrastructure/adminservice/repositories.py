"""AdminService implementations of the script, endpoint and operation repositories."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional, Sequence

from script_dispatch.modules.common.exceptions import FormatError, NotFoundError, TransportError
from script_dispatch.modules.operations.models import ClientResult, OperationFilter, OperationRecord
from script_dispatch.modules.scripts.models import ApprovalState, ScriptDefinition, ScriptSummary, ScriptType
from script_dispatch.modules.scripts.schema import decode_parameter_schema

from .client import AdminServiceClient, odata_literal

SCRIPTS_PATH = "wmi/SMS_Scripts"
DEVICES_PATH = "wmi/SMS_R_System"
COLLECTIONS_PATH = "wmi/SMS_Collection"
CLIENT_OPERATION_PATH = "wmi/SMS_ClientOperation.InitiateClientOperationEx"
EXECUTION_TASKS_PATH = "wmi/SMS_ScriptsExecutionTask"
EXECUTION_STATUS_PATH = "wmi/SMS_ScriptsExecutionStatus"

_SUMMARY_FIELDS = ["ScriptGuid", "ScriptName", "ScriptVersion", "ApprovalState", "Author", "LastUpdateTime"]
_OPERATION_ID_KEYS = ("OperationID", "OperationId", "ClientOperationId", "ClientOperationID")


class AdminServiceScriptRepository:
    def __init__(self, client: AdminServiceClient) -> None:
        self.client = client

    async def get_by_guid(self, script_guid: str) -> ScriptDefinition | None:
        # Lazy properties (hash, parameter definitions) are only returned when
        # the script is addressed by key.
        try:
            data = await self.client.get_json(f"{SCRIPTS_PATH}({odata_literal(script_guid)})")
        except NotFoundError:
            return None
        entry = _single_entry(data)
        if entry is None:
            return None
        return _to_script(entry)

    async def find_by_name(self, script_name: str) -> Sequence[ScriptSummary]:
        entries = await self.client.query(
            SCRIPTS_PATH,
            filters=[f"ScriptName eq {odata_literal(script_name)}"],
            select=_SUMMARY_FIELDS,
        )
        return [_to_summary(entry) for entry in entries]

    async def list_scripts(self, name_filter: Optional[str] = None) -> Sequence[ScriptSummary]:
        filters = [f"contains(ScriptName,{odata_literal(name_filter)})"] if name_filter else None
        entries = await self.client.query(SCRIPTS_PATH, filters=filters, select=_SUMMARY_FIELDS)
        return [_to_summary(entry) for entry in entries]


class AdminServiceEndpointRepository:
    def __init__(self, client: AdminServiceClient) -> None:
        self.client = client

    async def resolve_device_ids(self, device_names: Sequence[str]) -> dict[str, int]:
        if not device_names:
            return {}
        expression = " or ".join(f"Name eq {odata_literal(name)}" for name in device_names)
        entries = await self.client.query(DEVICES_PATH, filters=[f"({expression})"], select=["ResourceId", "Name"])
        known: dict[str, int] = {}
        for entry in entries:
            name = entry.get("Name")
            resource_id = _as_int(entry.get("ResourceId"))
            if isinstance(name, str) and resource_id is not None:
                known.setdefault(name.casefold(), resource_id)
        return {name: known[name.casefold()] for name in device_names if name.casefold() in known}

    async def collection_exists(self, collection_id: str) -> bool:
        entries = await self.client.query(
            COLLECTIONS_PATH,
            filters=[f"CollectionID eq {odata_literal(collection_id)}"],
            select=["CollectionID"],
        )
        return bool(entries)


class AdminServiceOperationRepository:
    def __init__(self, client: AdminServiceClient) -> None:
        self.client = client

    async def submit(
        self,
        *,
        payload: str,
        randomization_window: int,
        target_collection_id: str,
        target_resource_ids: Sequence[int],
        operation_type: int,
    ) -> int:
        body = {
            "Param": payload,
            "RandomizationWindow": randomization_window,
            "TargetCollectionID": target_collection_id,
            "TargetResourceIDs": list(target_resource_ids),
            "Type": operation_type,
        }
        data = await self.client.post_json(CLIENT_OPERATION_PATH, body)
        return extract_operation_id(data)

    async def query_tasks(self, criteria: OperationFilter) -> Sequence[OperationRecord]:
        filters = []
        if criteria.operation_id is not None:
            filters.append(f"ClientOperationId eq {int(criteria.operation_id)}")
        if criteria.collection_id:
            filters.append(f"CollectionId eq {odata_literal(criteria.collection_id)}")
        if criteria.script_name:
            filters.append(f"ScriptName eq {odata_literal(criteria.script_name)}")
        entries = await self.client.query(EXECUTION_TASKS_PATH, filters=filters)
        return [_to_record(entry) for entry in entries]

    async def query_results(self, operation_id: int) -> Sequence[ClientResult]:
        entries = await self.client.query(
            EXECUTION_STATUS_PATH,
            filters=[f"ClientOperationId eq {int(operation_id)}"],
        )
        return [_to_result(entry) for entry in entries]


def extract_operation_id(data: dict[str, Any]) -> int:
    """Find the operation id in a dispatch response, trying known keys in order."""
    return_value = data.get("ReturnValue")
    if return_value not in (None, 0, "0"):
        raise TransportError(f"Client operation was rejected with return value {return_value}")
    candidates: list[dict[str, Any]] = [data]
    nested = data.get("value")
    if isinstance(nested, dict):
        candidates.append(nested)
    elif isinstance(nested, list):
        candidates.extend(entry for entry in nested if isinstance(entry, dict))
    for candidate in candidates:
        for key in _OPERATION_ID_KEYS:
            operation_id = _as_int(candidate.get(key))
            if operation_id is not None:
                return operation_id
    raise TransportError("Client operation response did not include an operation id")


def _single_entry(data: dict[str, Any]) -> dict[str, Any] | None:
    value = data.get("value")
    if isinstance(value, list):
        return value[0] if value and isinstance(value[0], dict) else None
    if isinstance(value, dict):
        return value
    return data if "ScriptGuid" in data else None


def _to_script(entry: dict[str, Any]) -> ScriptDefinition:
    raw_type = _as_int(entry.get("ScriptType"))
    try:
        script_type = ScriptType(raw_type if raw_type is not None else 0)
    except ValueError as exc:
        raise FormatError(f"Unsupported script type: {entry.get('ScriptType')!r}") from exc
    return ScriptDefinition(
        script_guid=str(entry.get("ScriptGuid") or ""),
        script_name=str(entry.get("ScriptName") or ""),
        script_version=str(entry.get("ScriptVersion") or ""),
        script_type=script_type,
        approval_state=ApprovalState.from_code(_as_int(entry.get("ApprovalState"))),
        script_hash=entry.get("ScriptHash") or None,
        hash_algorithm=entry.get("ScriptHashAlgorithm") or "SHA256",
        schema=decode_parameter_schema(entry.get("ParamsDefinition")),
        author=entry.get("Author"),
        last_update_time=_parse_datetime(entry.get("LastUpdateTime")),
    )


def _to_summary(entry: dict[str, Any]) -> ScriptSummary:
    return ScriptSummary(
        script_guid=str(entry.get("ScriptGuid") or ""),
        script_name=str(entry.get("ScriptName") or ""),
        script_version=str(entry.get("ScriptVersion") or ""),
        approval_state=ApprovalState.from_code(_as_int(entry.get("ApprovalState"))),
        author=entry.get("Author"),
        last_update_time=_parse_datetime(entry.get("LastUpdateTime")),
    )


def _to_record(entry: dict[str, Any]) -> OperationRecord:
    return OperationRecord(
        operation_id=_as_int(_pick(entry, "ClientOperationId", "ClientOperationID")) or 0,
        script_guid=entry.get("ScriptGuid"),
        script_name=entry.get("ScriptName"),
        collection_id=_pick(entry, "CollectionId", "CollectionID"),
        collection_name=entry.get("CollectionName"),
        total_clients=_as_int(entry.get("TotalClients")) or 0,
        completed_clients=_as_int(entry.get("CompletedClients")) or 0,
        failed_clients=_as_int(entry.get("FailedClients")) or 0,
        offline_clients=_as_int(entry.get("OfflineClients")) or 0,
        not_applicable_clients=_as_int(entry.get("NotApplicableClients")) or 0,
        unknown_clients=_as_int(entry.get("UnknownClients")) or 0,
        last_update_time=_parse_datetime(entry.get("LastUpdateTime")),
    )


def _to_result(entry: dict[str, Any]) -> ClientResult:
    return ClientResult(
        resource_id=_as_int(_pick(entry, "ResourceId", "ResourceID")) or 0,
        device_name=entry.get("DeviceName"),
        execution_state=_as_int(entry.get("ScriptExecutionState")),
        exit_code=_as_int(entry.get("ScriptExitCode")),
        output=_as_text(entry.get("ScriptOutput")),
    )


def _pick(entry: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def _as_text(value: Any) -> str | None:
    # Structured rows are re-serialized so the output decoder can parse them back.
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


__all__ = [
    "AdminServiceEndpointRepository",
    "AdminServiceOperationRepository",
    "AdminServiceScriptRepository",
    "extract_operation_id",
]
