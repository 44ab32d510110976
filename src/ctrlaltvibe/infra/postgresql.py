"""Async engine and session factory.

Postgres through asyncpg in production; SQLite URLs skip the pool options.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from ctrlaltvibe.app.config import DatabaseConfig, get_settings
from ctrlaltvibe.core import models  # noqa: F401  (registers tables on the metadata)
from ctrlaltvibe.core.logging_schema import LogEvent

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(config: DatabaseConfig) -> dict:
    if config.url.startswith("sqlite"):
        return {}
    return {
        "pool_size": config.pool_size,
        "max_overflow": config.max_overflow,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


async def init_db() -> None:
    """Create the engine, verify connectivity and create missing tables."""
    global _engine, _session_factory

    config = get_settings().database
    _engine = create_async_engine(config.url, echo=config.echo, **_engine_options(config))
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)

    try:
        async with _engine.begin() as conn:
            if config.create_tables:
                await conn.run_sync(SQLModel.metadata.create_all)
    except Exception as exc:
        logger.error(
            "Database connection failed",
            extra={"event": LogEvent.DB_ERROR, "error_type": type(exc).__name__, "error": str(exc)},
        )
        raise

    logger.info(
        "Database connected",
        extra={
            "event": LogEvent.DB_CONNECTED,
            "pool_size": config.pool_size,
            "create_tables": config.create_tables,
        },
    )


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("Database not initialized")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized")
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_session_factory()() as session:
        yield session
