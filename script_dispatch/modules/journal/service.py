"""Domain service recording dispatched operations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from script_dispatch.db.models import DispatchJournalEntry
from script_dispatch.infrastructure.database.repositories.journal_repository import SqlJournalRepository
from script_dispatch.modules.scripts.models import DispatchReceipt

from .models import JournalEntry
from .repository import JournalRepository


@dataclass(slots=True)
class JournalService:
    repository: JournalRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "JournalService":
        return cls(SqlJournalRepository(session))

    async def record(self, receipt: DispatchReceipt, *, operator: Optional[str] = None) -> JournalEntry:
        model = await self.repository.add(
            operation_id=receipt.operation_id,
            script_guid=receipt.script_guid,
            script_name=receipt.script_name,
            script_version=receipt.script_version,
            collection_id=receipt.target.collection_id or None,
            resource_ids=json.dumps(list(receipt.target.resource_ids)),
            parameter_hash=receipt.parameter_hash or None,
            operator=operator,
            dispatched_at=receipt.dispatched_at,
        )
        return self._to_domain(model)

    async def list_recent(
        self,
        limit: int = 50,
        offset: int = 0,
        script_name: Optional[str] = None,
    ) -> list[JournalEntry]:
        models = await self.repository.list_recent(limit, offset, script_name)
        return [self._to_domain(model) for model in models]

    async def get_by_operation(self, operation_id: int) -> JournalEntry | None:
        model = await self.repository.get_by_operation(operation_id)
        return self._to_domain(model) if model else None

    @staticmethod
    def _to_domain(model: DispatchJournalEntry) -> JournalEntry:
        resource_ids: list[int] = []
        if model.resource_ids:
            try:
                resource_ids = [int(item) for item in json.loads(model.resource_ids)]
            except (json.JSONDecodeError, TypeError, ValueError):
                resource_ids = []
        return JournalEntry(
            id=model.id,
            operation_id=model.operation_id,
            script_guid=model.script_guid,
            script_name=model.script_name,
            script_version=model.script_version,
            collection_id=model.collection_id,
            resource_ids=resource_ids,
            parameter_hash=model.parameter_hash,
            operator=model.operator,
            dispatched_at=model.dispatched_at,
        )
