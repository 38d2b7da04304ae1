"""Domain service dependency providers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from script_dispatch.core.container import ApplicationContainer
from script_dispatch.modules.journal.service import JournalService
from script_dispatch.modules.operations.service import OperationStatusService
from script_dispatch.modules.scripts.service import ScriptExecutionService

from .container import get_app_container, get_db_session


def get_script_service(container: ApplicationContainer = Depends(get_app_container)) -> ScriptExecutionService:
    return ScriptExecutionService.with_client(container.adminservice)


def get_status_service(container: ApplicationContainer = Depends(get_app_container)) -> OperationStatusService:
    return OperationStatusService.with_client(
        container.adminservice,
        max_concurrency=container.settings.execution.max_concurrent_status_fetches,
    )


def get_journal_service(db: AsyncSession = Depends(get_db_session)) -> JournalService:
    return JournalService.with_session(db)


__all__ = [
    "get_journal_service",
    "get_script_service",
    "get_status_service",
]
