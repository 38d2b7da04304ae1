"""Protocols for script and endpoint lookups against the management backend."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .models import ScriptDefinition, ScriptSummary


class ScriptRepository(Protocol):
    async def get_by_guid(self, script_guid: str) -> ScriptDefinition | None:
        ...

    async def find_by_name(self, script_name: str) -> Sequence[ScriptSummary]:
        ...

    async def list_scripts(self, name_filter: Optional[str] = None) -> Sequence[ScriptSummary]:
        ...


class EndpointRepository(Protocol):
    async def resolve_device_ids(self, device_names: Sequence[str]) -> dict[str, int]:
        """Map each known device name to its resource id; unknown names are omitted."""
        ...

    async def collection_exists(self, collection_id: str) -> bool:
        ...
