"""
Alembic Migration Environment.

Migrates the notes and images tables on whichever database the app is
configured for (database.yaml, or DATABASE_URL). SQLite needs batch mode,
which copies a table to alter it; the models' naming convention keeps
constraint names stable across those copies.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import async_engine_from_config

from modules.backend.core.config import get_database_url
from modules.backend.models.base import Base
from modules.backend.models.image import Image  # noqa: F401
from modules.backend.models.note import Note  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=_is_sqlite(url),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL instead of executing it (alembic upgrade head --sql)."""
    url = get_database_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})

    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection: Connection, url: str) -> None:
    _configure(url, connection=connection)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    url = get_database_url()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url

    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_with_connection, url)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
