"""Domain service consolidating operation task records and endpoint results."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from script_dispatch.infrastructure.adminservice.client import AdminServiceClient
from script_dispatch.infrastructure.adminservice.repositories import AdminServiceOperationRepository
from script_dispatch.modules.common.exceptions import DispatchError

from .models import OperationFilter, OperationRecord, OperationStatus, OperationStatusView
from .output import decode_output
from .repository import OperationRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OperationStatusService:
    repository: OperationRepository
    max_concurrency: int = 8

    @classmethod
    def with_client(cls, client: AdminServiceClient, *, max_concurrency: int = 8) -> "OperationStatusService":
        return cls(AdminServiceOperationRepository(client), max_concurrency)

    async def get_status(
        self,
        *,
        operation_id: Optional[int] = None,
        collection_id: Optional[str] = None,
        script_name: Optional[str] = None,
    ) -> list[OperationStatusView]:
        """Return one consolidated view per matching operation task.

        Each call is a point-in-time snapshot.  When nothing matches, a single
        synthetic ``error`` view with null counters is returned so callers can
        tell a missing operation apart from one with zero completions.
        """
        criteria = OperationFilter(
            operation_id=operation_id,
            collection_id=collection_id or None,
            script_name=script_name or None,
        )
        records = await self.repository.query_tasks(criteria)
        if not records:
            logger.info("No operation task matched %s", criteria)
            return [
                OperationStatusView(
                    operation_id=operation_id,
                    status=OperationStatus.ERROR,
                    script_name=script_name,
                    collection_id=collection_id,
                    error="No matching operation task was found",
                )
            ]

        semaphore = asyncio.Semaphore(max(1, self.max_concurrency))

        async def _guarded(record: OperationRecord) -> OperationStatusView:
            async with semaphore:
                return await self._consolidate(record)

        views = await asyncio.gather(*(_guarded(record) for record in records))
        return list(views)

    async def get_operation(self, operation_id: int) -> OperationStatusView:
        views = await self.get_status(operation_id=operation_id)
        return views[0]

    async def _consolidate(self, record: OperationRecord) -> OperationStatusView:
        view = self._to_view(record)
        if record.completed_clients == 0:
            view.status = OperationStatus.NO_CLIENT_COMPLETED
            return view

        if record.completed_clients == record.total_clients:
            view.status = OperationStatus.ALL_CLIENTS_COMPLETED
        else:
            view.status = OperationStatus.SOME_CLIENTS_COMPLETED

        try:
            results = await self.repository.query_results(record.operation_id)
        except DispatchError as exc:
            logger.warning("Fetching results for operation %s failed: %s", record.operation_id, exc)
            view.error = str(exc)
            return view

        for result in results:
            try:
                result.decoded_output = decode_output(result.output)
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning(
                    "Decoding output of resource %s in operation %s failed: %s",
                    result.resource_id,
                    record.operation_id,
                    exc,
                )
                result.decoded_output = result.output
        view.results = list(results)
        return view

    @staticmethod
    def _to_view(record: OperationRecord) -> OperationStatusView:
        return OperationStatusView(
            operation_id=record.operation_id,
            status=OperationStatus.NO_CLIENT_COMPLETED,
            script_guid=record.script_guid,
            script_name=record.script_name,
            collection_id=record.collection_id,
            collection_name=record.collection_name,
            total_clients=record.total_clients,
            completed_clients=record.completed_clients,
            failed_clients=record.failed_clients,
            offline_clients=record.offline_clients,
            not_applicable_clients=record.not_applicable_clients,
            unknown_clients=record.unknown_clients,
            last_update_time=record.last_update_time,
        )
