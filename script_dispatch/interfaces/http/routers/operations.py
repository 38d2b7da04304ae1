"""Operation status and dispatch history endpoints."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from script_dispatch.core.security import get_current_operator
from script_dispatch.interfaces.http.deps import get_journal_service, get_status_service
from script_dispatch.interfaces.http.errors import to_http_exception
from script_dispatch.modules.common.exceptions import DispatchError
from script_dispatch.modules.journal.models import JournalEntry
from script_dispatch.modules.journal.service import JournalService
from script_dispatch.modules.operations.models import ClientResult, OperationStatusView
from script_dispatch.modules.operations.service import OperationStatusService
from script_dispatch.schemas import (
    ClientResultResponse,
    JournalEntryResponse,
    JournalListResponse,
    OperationDetailResponse,
    OperationStatusListResponse,
    OperationStatusResponse,
    TokenData,
)

router = APIRouter()


@router.get("/status", response_model=OperationStatusListResponse, summary="Status of matching operations")
async def get_operations_status(
    operation_id: Optional[int] = None,
    collection_id: Optional[str] = None,
    script_name: Optional[str] = None,
    operator: TokenData = Depends(get_current_operator),
    service: OperationStatusService = Depends(get_status_service),
) -> OperationStatusListResponse:
    try:
        views = await service.get_status(
            operation_id=operation_id,
            collection_id=collection_id,
            script_name=script_name,
        )
    except DispatchError as exc:
        raise to_http_exception(exc) from exc
    return OperationStatusListResponse(operations=[_to_status_response(view) for view in views])


@router.get("/history", response_model=JournalListResponse, summary="Operations dispatched through this service")
async def get_dispatch_history(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    script_name: Optional[str] = None,
    operator: TokenData = Depends(get_current_operator),
    journal: JournalService = Depends(get_journal_service),
) -> JournalListResponse:
    entries = await journal.list_recent(limit=limit, offset=offset, script_name=script_name)
    return JournalListResponse(entries=[_to_journal_response(entry) for entry in entries])


@router.get("/{operation_id}", response_model=OperationDetailResponse, summary="Status of one operation")
async def get_operation_status(
    operation_id: int,
    operator: TokenData = Depends(get_current_operator),
    service: OperationStatusService = Depends(get_status_service),
    journal: JournalService = Depends(get_journal_service),
) -> OperationDetailResponse:
    try:
        view = await service.get_operation(operation_id)
    except DispatchError as exc:
        raise to_http_exception(exc) from exc
    entry = await journal.get_by_operation(operation_id)
    return OperationDetailResponse(
        **_to_status_response(view).model_dump(),
        dispatch=_to_journal_response(entry) if entry else None,
    )


def _to_result_response(result: ClientResult) -> ClientResultResponse:
    return ClientResultResponse(
        resource_id=result.resource_id,
        device_name=result.device_name,
        execution_state=result.execution_state,
        state_name=result.state_name,
        exit_code=result.exit_code,
        output=result.output,
        decoded_output=result.decoded_output,
    )


def _to_status_response(view: OperationStatusView) -> OperationStatusResponse:
    return OperationStatusResponse(
        operation_id=view.operation_id,
        status=view.status,
        script_guid=view.script_guid,
        script_name=view.script_name,
        collection_id=view.collection_id,
        collection_name=view.collection_name,
        total_clients=view.total_clients,
        completed_clients=view.completed_clients,
        failed_clients=view.failed_clients,
        offline_clients=view.offline_clients,
        not_applicable_clients=view.not_applicable_clients,
        unknown_clients=view.unknown_clients,
        last_update_time=view.last_update_time,
        results=[_to_result_response(result) for result in view.results],
        error=view.error,
    )


def _to_journal_response(entry: JournalEntry) -> JournalEntryResponse:
    return JournalEntryResponse(
        id=entry.id,
        operation_id=entry.operation_id,
        script_guid=entry.script_guid,
        script_name=entry.script_name,
        script_version=entry.script_version,
        collection_id=entry.collection_id,
        resource_ids=entry.resource_ids,
        parameter_hash=entry.parameter_hash,
        operator=entry.operator,
        dispatched_at=entry.dispatched_at,
    )
