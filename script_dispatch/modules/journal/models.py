"""Domain representation of a recorded dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class JournalEntry:
    id: str
    operation_id: int
    script_guid: str
    script_name: str
    script_version: Optional[str]
    collection_id: Optional[str]
    resource_ids: list[int]
    parameter_hash: Optional[str]
    operator: Optional[str]
    dispatched_at: datetime
