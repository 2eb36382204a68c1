"""Alembic environment — migrates the Synapse schema with the application's own settings.

Invariants:
    - The target URL comes from synapse.config.Settings, the same source the app uses;
      an explicit sqlalchemy.url in alembic.ini only applies when DATABASE_URL is unset
    - Base.metadata is fully populated (synapse.models imported) before any comparison
    - SQLite targets get the Unicode-aware lower() before the skill index is built

Design Decisions:
    - Online mode drives the async engine through run_sync: one driver stack
      (asyncpg / aiosqlite) for the app and its migrations
    - NullPool: a migration run is one short-lived connection
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

import synapse.models  # noqa: F401  (populates Base.metadata)
from synapse.config import get_settings
from synapse.db.base import Base
from synapse.infrastructure.database import install_sqlite_functions

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _target_url() -> str:
    if "DATABASE_URL" not in os.environ and config.get_main_option("sqlalchemy.url"):
        return config.get_main_option("sqlalchemy.url")
    return get_settings().database_url


def _configure(**kwargs) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)


async def _migrate_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    if engine.dialect.name == "sqlite":
        install_sqlite_functions(engine)
    async with engine.connect() as connection:
        await connection.run_sync(_migrate)
    await engine.dispose()


if context.is_offline_mode():
    _configure(
        url=_target_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_migrate_online(_target_url()))
