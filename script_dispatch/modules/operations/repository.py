"""Protocol for client operation submission and execution record queries."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import ClientResult, OperationFilter, OperationRecord


class OperationRepository(Protocol):
    async def submit(
        self,
        *,
        payload: str,
        randomization_window: int,
        target_collection_id: str,
        target_resource_ids: Sequence[int],
        operation_type: int,
    ) -> int:
        ...

    async def query_tasks(self, criteria: OperationFilter) -> Sequence[OperationRecord]:
        ...

    async def query_results(self, operation_id: int) -> Sequence[ClientResult]:
        ...
