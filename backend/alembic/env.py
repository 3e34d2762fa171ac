"""Alembic environment for the map_configs and layer_groups schema.

Runs against the same async psycopg engine URL the service uses, so a plain
``postgresql://`` or ``postgis://`` DATABASE_URL works for both.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context
from core.config import DATABASE_URL
from db.session import make_async_url

config = context.config
fileConfig(config.config_file_name)

if DATABASE_URL:
    config.set_main_option("sqlalchemy.url", DATABASE_URL)

# Registers MapConfig, LayerGroup and LayerGroupOverlay on Base.metadata.
import db.models  # noqa: E402,F401
from db.base import Base  # noqa: E402

target_metadata = Base.metadata


def _database_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError("No database URL; set DATABASE_URL or sqlalchemy.url")
    return url


def run_migrations_offline():
    """Emit the map configuration DDL as SQL without connecting."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def apply_migrations(connection: Connection):
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    """Apply pending revisions through an async psycopg engine."""
    url = _database_url()
    async_url = make_async_url(url)
    if async_url is None:
        raise RuntimeError(f"Unsupported database URL for migrations: {url.split(':', 1)[0]}")

    engine = create_async_engine(async_url, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(apply_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
