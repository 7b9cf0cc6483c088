"""Async SQLAlchemy engine and session factory.

When DATABASE_URL is configured, provides an async engine, a session
factory and a request-scoped session dependency.  When it is not, the
engine and factory are None and the API falls back to in-memory
repositories.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# --- Engine and session factory (None when no DATABASE_URL) ---

if SETTINGS.database_url:
    engine: AsyncEngine | None = create_async_engine(
        SETTINGS.database_url,
        echo=SETTINGS.is_dev,
        pool_pre_ping=True,
    )
    async_session_factory: async_sessionmaker[AsyncSession] | None = (
        make_session_factory(engine)
    )
else:
    engine = None
    async_session_factory = None


async def get_optional_session() -> AsyncGenerator[AsyncSession | None, None]:
    """FastAPI dependency yielding a request-scoped session, or None.

    Commits on success, rolls back on exception.  Yields None when no
    database is configured so callers can pick in-memory repositories.
    FastAPI caches the dependency per request, so every repository built
    from it shares one transaction.

    The exit code runs after the response has been sent, so handlers that
    write must ``await session.commit()`` themselves before returning.
    """
    if async_session_factory is None:
        yield None
        return
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping() -> bool:
    """Return True if the database answers a trivial query."""
    if engine is None:
        return False

    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True


@asynccontextmanager
async def lifespan_db():
    """Startup/shutdown hook for the database engine."""
    if engine is None:
        logger.info("No DATABASE_URL configured, using in-memory repositories")
        yield
        return

    logger.info("Database engine created: %s", engine.url.render_as_string(hide_password=True))
    yield
    await engine.dispose()
    logger.info("Database engine disposed")
