"""Domain service resolving scripts and dispatching them to endpoints."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence

from script_dispatch.infrastructure.adminservice.client import AdminServiceClient
from script_dispatch.infrastructure.adminservice.repositories import (
    AdminServiceEndpointRepository,
    AdminServiceOperationRepository,
    AdminServiceScriptRepository,
)
from script_dispatch.modules.common.exceptions import (
    IntegrityUnavailableError,
    NotFoundError,
    ScriptNotApprovedError,
    ValidationError,
)
from script_dispatch.modules.operations.models import RUN_SCRIPT_OPERATION_TYPE
from script_dispatch.modules.operations.repository import OperationRepository

from .envelope import build_envelope
from .models import DispatchReceipt, ExecutionTarget, ScriptDefinition, ScriptSummary
from .parameters import encode_parameters
from .repository import EndpointRepository, ScriptRepository

logger = logging.getLogger(__name__)

# Dispatch never asks the backend to spread delivery over a random delay.
RANDOMIZATION_WINDOW = 0

_MISSING_HASH_HINT = (
    "The content hash of script {name} is not exposed by the backend, so its "
    "parameters cannot be integrity-stamped. Run a script without parameters, "
    "or obtain the script hash through another channel and supply it explicitly."
)


@dataclass(slots=True)
class ScriptExecutionService:
    scripts: ScriptRepository
    endpoints: EndpointRepository
    operations: OperationRepository

    @classmethod
    def with_client(cls, client: AdminServiceClient) -> "ScriptExecutionService":
        return cls(
            AdminServiceScriptRepository(client),
            AdminServiceEndpointRepository(client),
            AdminServiceOperationRepository(client),
        )

    async def list_scripts(self, name_filter: Optional[str] = None) -> list[ScriptSummary]:
        return list(await self.scripts.list_scripts(name_filter))

    async def resolve_script(
        self,
        script_ref: Optional[str] = None,
        *,
        script_guid: Optional[str] = None,
        script_name: Optional[str] = None,
    ) -> ScriptDefinition:
        """Resolve a script by reference, GUID or name.

        ``script_ref`` may hold either form.  When both a GUID and a name are
        given they must describe the same script.
        """
        if script_ref:
            if _is_guid(script_ref):
                script_guid = script_guid or script_ref
            else:
                script_name = script_name or script_ref
        if not script_guid and not script_name:
            raise ValidationError("A script GUID or script name is required")

        if script_guid:
            script = await self.scripts.get_by_guid(script_guid.strip("{}"))
            if script is None:
                raise NotFoundError(f"Script {script_guid} was not found")
            if script_name and script.script_name.casefold() != script_name.casefold():
                raise ValidationError(
                    f"Script GUID {script_guid} belongs to {script.script_name}, not {script_name}"
                )
            return script

        matches = list(await self.scripts.find_by_name(script_name))
        if not matches:
            raise NotFoundError(f"Script {script_name} was not found")
        if len(matches) > 1:
            guids = ", ".join(match.script_guid for match in matches)
            raise ValidationError(f"Script name {script_name} is ambiguous; use one of: {guids}")
        script = await self.scripts.get_by_guid(matches[0].script_guid)
        if script is None:
            raise NotFoundError(f"Script {script_name} was not found")
        return script

    async def resolve_target(
        self,
        *,
        collection_id: Optional[str] = None,
        resource_ids: Iterable[int] = (),
        device_names: Sequence[str] = (),
    ) -> ExecutionTarget:
        collection_id = (collection_id or "").strip()
        unique_ids: list[int] = []
        for resource_id in resource_ids:
            if isinstance(resource_id, bool) or not isinstance(resource_id, int) or resource_id <= 0:
                raise ValidationError(f"Invalid resource id: {resource_id!r}")
            if resource_id not in unique_ids:
                unique_ids.append(resource_id)

        if device_names:
            resolved = await self.endpoints.resolve_device_ids(device_names)
            missing = [name for name in device_names if name not in resolved]
            if missing:
                raise NotFoundError(f"Devices not found: {', '.join(missing)}")
            for name in device_names:
                if resolved[name] not in unique_ids:
                    unique_ids.append(resolved[name])

        if collection_id and not await self.endpoints.collection_exists(collection_id):
            raise NotFoundError(f"Collection {collection_id} was not found")

        target = ExecutionTarget(collection_id=collection_id, resource_ids=tuple(unique_ids))
        if target.is_empty:
            raise ValidationError("A target collection or at least one endpoint is required")
        return target

    async def run_script(
        self,
        script: ScriptDefinition,
        target: ExecutionTarget,
        arguments: Optional[Mapping[str, Any]] = None,
        *,
        group_id: Optional[str] = None,
    ) -> DispatchReceipt:
        """Validate, encode and submit one script invocation.

        Every check runs before the backend is contacted; the call returns as
        soon as the operation is accepted and does not wait for endpoints.
        """
        if target.is_empty:
            raise ValidationError("A target collection or at least one endpoint is required")
        if not script.is_approved:
            raise ScriptNotApprovedError(script.script_name, script.approval_state.value)

        block = encode_parameters(script.schema, arguments, group_id=group_id)
        if not block.is_empty and not script.has_hash:
            raise IntegrityUnavailableError(_MISSING_HASH_HINT.format(name=script.script_name))

        envelope = build_envelope(script, block)
        operation_id = await self.operations.submit(
            payload=envelope.payload,
            randomization_window=RANDOMIZATION_WINDOW,
            target_collection_id=target.collection_id,
            target_resource_ids=list(target.resource_ids),
            operation_type=RUN_SCRIPT_OPERATION_TYPE,
        )
        logger.info(
            "Dispatched script %s v%s as operation %s (collection=%r, resources=%s)",
            script.script_name,
            script.script_version,
            operation_id,
            target.collection_id,
            list(target.resource_ids),
        )
        return DispatchReceipt(
            operation_id=operation_id,
            script_guid=script.script_guid,
            script_name=script.script_name,
            script_version=script.script_version,
            target=target,
            parameter_group_id=block.group_id,
            parameter_hash=envelope.parameter_hash,
            dispatched_at=datetime.now(timezone.utc),
        )


def _is_guid(value: str) -> bool:
    try:
        uuid.UUID(value.strip().strip("{}"))
    except ValueError:
        return False
    return True
