"""
Async SQLAlchemy database session configuration.

Leads, users and notes live in a managed PostgreSQL instance
(Supabase). SQLite via aiosqlite is accepted for local runs and tests.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from salesdesk.config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    # Supabase transaction pooler rejects prepared statement caching
    if "+asyncpg" in url:
        return {"statement_cache_size": 0}
    return {}


engine = create_async_engine(
    settings.database_url,
    poolclass=NullPool,
    echo=settings.log_level.upper() == "DEBUG",
    connect_args=_connect_args(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Commits when the request handler returns, rolls back if it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions outside request handling
    (scheduler jobs, startup).

        async with get_db_context() as db:
            result = await db.execute(...)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.exception("Rolling back session after error")
            await session.rollback()
            raise
