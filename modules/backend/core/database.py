"""
Database Configuration.

The async engine and session factory behind the note store, created on
first use so importing this module never reads configuration.

SQLite (the default, via aiosqlite) serialises writers; connections wait
up to timeouts.database seconds for the write lock before failing with
"database is locked", which services report as a StoreError.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from modules.backend.core.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(url: str) -> dict[str, Any]:
    from modules.backend.core.config import get_app_config

    app_config = get_app_config()
    db_config = app_config.database
    options: dict[str, Any] = {"echo": db_config.echo}

    if make_url(url).get_backend_name() == "sqlite":
        options["connect_args"] = {"timeout": app_config.application.timeouts.database}
    else:
        options.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            pool_recycle=db_config.pool_recycle,
            pool_pre_ping=True,
        )
    return options


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        from modules.backend.core.config import get_database_url

        url = get_database_url()
        _engine = create_async_engine(url, **_engine_options(url))
        logger.debug("Database engine created", extra={"dialect": _engine.dialect.name})
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_factory


async def init_database() -> None:
    """
    Create the notes and images tables if missing, when database.yaml allows.

    Schema changes to an existing database go through Alembic instead.
    """
    from modules.backend.core.config import get_app_config
    from modules.backend.models.base import Base
    from modules.backend.models import image, note  # noqa: F401

    if not get_app_config().database.create_tables_on_startup:
        return

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured", extra={"tables": sorted(Base.metadata.tables)})


async def dispose_engine() -> None:
    """Close pooled connections; the next get_engine() starts fresh."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session: one unit of work per request.

    Committed after the endpoint returns, rolled back if anything raised,
    so a failed cascade delete or move leaves the store untouched.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
