"""Container and database session dependency providers."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from script_dispatch.core.container import ApplicationContainer, get_app_container


async def get_db_session(
    container: ApplicationContainer = Depends(get_app_container),
) -> AsyncGenerator[AsyncSession, None]:
    async for session in container.database.session():
        yield session


__all__ = ["get_app_container", "get_db_session"]
