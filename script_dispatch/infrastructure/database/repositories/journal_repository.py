"""SQLAlchemy implementation for JournalRepository"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from script_dispatch.db.models import DispatchJournalEntry


class SqlJournalRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

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
        entry = DispatchJournalEntry(
            operation_id=operation_id,
            script_guid=script_guid,
            script_name=script_name,
            script_version=script_version,
            collection_id=collection_id,
            resource_ids=resource_ids,
            parameter_hash=parameter_hash,
            operator=operator,
            dispatched_at=dispatched_at,
        )
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def list_recent(
        self,
        limit: int,
        offset: int,
        script_name: Optional[str] = None,
    ) -> Sequence[DispatchJournalEntry]:
        stmt = select(DispatchJournalEntry)
        if script_name:
            stmt = stmt.where(DispatchJournalEntry.script_name == script_name)
        stmt = stmt.order_by(desc(DispatchJournalEntry.dispatched_at)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_by_operation(self, operation_id: int) -> DispatchJournalEntry | None:
        stmt = select(DispatchJournalEntry).where(DispatchJournalEntry.operation_id == operation_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()
