"""Protocol for dispatch journal persistence"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from script_dispatch.db.models import DispatchJournalEntry


class JournalRepository(Protocol):
    async def add(
        self,
        *,
        operation_id: int,
        script_guid: str,
        script_name: str,
        script_version: str | None,
        collection_id: str | None,
        resource_ids: str | None,
        parameter_hash: str | None,
        operator: str | None,
        dispatched_at: datetime,
    ) -> DispatchJournalEntry:
        ...

    async def list_recent(
        self,
        limit: int,
        offset: int,
        script_name: Optional[str] = None,
    ) -> Sequence[DispatchJournalEntry]:
        ...

    async def get_by_operation(self, operation_id: int) -> DispatchJournalEntry | None:
        ...
