"""Async SQLAlchemy engine and session setup."""

import logging
from collections.abc import AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.db.models import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


async def init_db(database_url: str) -> None:
    """Create the engine and session factory, creating tables if needed.

    SQL statement logging is configured by ``setup_logging(sql_echo=...)``.
    """
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()

    _engine = create_async_engine(database_url, pool_pre_ping=True)
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Database initialized at {make_url(database_url).render_as_string(hide_password=True)}")


async def close_db() -> None:
    """Dispose of the engine. Safe to call when the database was never initialized."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("Database connections closed")
    _engine = None
    _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the async session factory. Must call init_db first."""
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


async def get_db() -> AsyncIterator[AsyncSession]:
    """Get a database session (for use as FastAPI dependency)."""
    factory = get_session_factory()
    async with factory() as session:
        yield session
