"""Simple dependency container for wiring core services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Request

from script_dispatch.core.config import Settings, get_settings
from script_dispatch.infrastructure.adminservice.client import AdminServiceClient
from script_dispatch.infrastructure.database.session import Database

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    adminservice: AdminServiceClient
    database: Database

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApplicationContainer":
        return cls(
            settings=settings,
            adminservice=AdminServiceClient(settings.adminservice),
            database=Database.from_settings(settings),
        )

    async def startup(self) -> None:
        """Open the backend connection and make sure the journal table exists."""
        await self.adminservice.connect()
        await self.database.init_db()
        logger.info("Container started (environment=%s)", self.settings.environment)

    async def shutdown(self) -> None:
        await self.adminservice.close()
        await self.database.dispose()


@lru_cache()
def get_container() -> ApplicationContainer:
    return ApplicationContainer.from_settings(get_settings())


def get_app_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


__all__ = ["ApplicationContainer", "get_app_container", "get_container"]
