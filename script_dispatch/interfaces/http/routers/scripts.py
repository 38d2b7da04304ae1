"""Script lookup and dispatch endpoints."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError

from script_dispatch.core.security import get_current_operator
from script_dispatch.interfaces.http.deps import get_journal_service, get_script_service
from script_dispatch.interfaces.http.errors import to_http_exception
from script_dispatch.modules.common.exceptions import DispatchError
from script_dispatch.modules.journal.service import JournalService
from script_dispatch.modules.scripts.models import DispatchReceipt, ScriptDefinition, ScriptSummary
from script_dispatch.modules.scripts.service import ScriptExecutionService
from script_dispatch.schemas import (
    ParameterSpecResponse,
    ScriptDetailResponse,
    ScriptListResponse,
    ScriptRunRequest,
    ScriptRunResponse,
    ScriptSummaryResponse,
    TokenData,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ScriptListResponse, summary="List scripts")
async def list_scripts(
    name: Optional[str] = None,
    operator: TokenData = Depends(get_current_operator),
    service: ScriptExecutionService = Depends(get_script_service),
) -> ScriptListResponse:
    try:
        summaries = await service.list_scripts(name)
    except DispatchError as exc:
        raise to_http_exception(exc) from exc
    return ScriptListResponse(
        total=len(summaries),
        scripts=[_to_summary_response(summary) for summary in summaries],
    )


@router.post(
    "/run",
    response_model=ScriptRunResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Run a script on a collection or on explicit endpoints",
)
async def run_script(
    payload: ScriptRunRequest,
    operator: TokenData = Depends(get_current_operator),
    service: ScriptExecutionService = Depends(get_script_service),
    journal: JournalService = Depends(get_journal_service),
) -> ScriptRunResponse:
    try:
        script = await service.resolve_script(
            payload.script,
            script_guid=payload.script_guid,
            script_name=payload.script_name,
        )
        target = await service.resolve_target(
            collection_id=payload.collection_id,
            resource_ids=payload.resource_ids,
            device_names=payload.device_names,
        )
        receipt = await service.run_script(script, target, payload.parameters)
    except DispatchError as exc:
        raise to_http_exception(exc) from exc

    try:
        await journal.record(receipt, operator=operator.username)
    except SQLAlchemyError:
        # The operation is already running; the caller still needs its id.
        logger.exception("Could not journal operation %s", receipt.operation_id)
    return _to_run_response(receipt)


@router.get("/{script_ref}", response_model=ScriptDetailResponse, summary="Script details and parameters")
async def get_script(
    script_ref: str,
    operator: TokenData = Depends(get_current_operator),
    service: ScriptExecutionService = Depends(get_script_service),
) -> ScriptDetailResponse:
    try:
        script = await service.resolve_script(script_ref)
    except DispatchError as exc:
        raise to_http_exception(exc) from exc
    return _to_detail_response(script)


def _to_summary_response(summary: ScriptSummary) -> ScriptSummaryResponse:
    return ScriptSummaryResponse(
        script_guid=summary.script_guid,
        script_name=summary.script_name,
        script_version=summary.script_version,
        approval_state=summary.approval_state,
        author=summary.author,
        last_update_time=summary.last_update_time,
    )


def _to_detail_response(script: ScriptDefinition) -> ScriptDetailResponse:
    return ScriptDetailResponse(
        script_guid=script.script_guid,
        script_name=script.script_name,
        script_version=script.script_version,
        approval_state=script.approval_state,
        author=script.author,
        last_update_time=script.last_update_time,
        script_type=int(script.script_type),
        has_hash=script.has_hash,
        hash_algorithm=script.hash_algorithm,
        has_schema=script.schema is not None,
        parameters=[
            ParameterSpecResponse(
                name=spec.name,
                data_type=spec.data_type,
                required=spec.required,
                hidden=spec.hidden,
                default_value=spec.default_value,
                description=spec.description,
            )
            for spec in script.schema or ()
        ],
    )


def _to_run_response(receipt: DispatchReceipt) -> ScriptRunResponse:
    return ScriptRunResponse(
        operation_id=receipt.operation_id,
        script_guid=receipt.script_guid,
        script_name=receipt.script_name,
        script_version=receipt.script_version,
        collection_id=receipt.target.collection_id,
        resource_ids=list(receipt.target.resource_ids),
        parameter_group_id=receipt.parameter_group_id,
        parameter_hash=receipt.parameter_hash,
        dispatched_at=receipt.dispatched_at,
    )
