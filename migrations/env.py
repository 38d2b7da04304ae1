"""Alembic environment for the dispatch journal database."""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection

from script_dispatch.core.config import get_settings
from script_dispatch.db import models  # noqa: F401
from script_dispatch.infrastructure.database.base import Base
from script_dispatch.infrastructure.database.session import build_engine

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()


def _configure(**kwargs) -> None:
    # SQLite cannot ALTER most constraints in place; batch mode rebuilds the table.
    context.configure(
        target_metadata=Base.metadata,
        render_as_batch=settings.database_url.startswith("sqlite"),
        compare_type=True,
        **kwargs,
    )


def migrate_offline() -> None:
    """Emit SQL for the configured database without connecting to it."""
    _configure(
        url=settings.database_url.replace("+aiosqlite", ""),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate_with(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def migrate_online() -> None:
    engine = build_engine(settings)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate_with)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    migrate_offline()
else:
    asyncio.run(migrate_online())
