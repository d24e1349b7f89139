"""
Async SQLAlchemy engine helpers and the startup connectivity check.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from paycor_sync.core.config import DatabaseSettings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class DatabaseUnavailableError(RuntimeError):
    """Raised when the database cannot be reached during startup."""


def build_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the process-wide engine; connections are pooled by SQLAlchemy."""
    return create_async_engine(settings.url, echo=False, pool_pre_ping=True)


async def ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_database(engine: AsyncEngine, *, retry_delay: float = 5.0) -> None:
    """
    Verify connectivity, retrying exactly once after ``retry_delay`` seconds.

    Raises ``DatabaseUnavailableError`` when the second attempt fails too.
    """
    try:
        await ping(engine)
    except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
        logger.warning(
            "Error pinging database, retrying in %s seconds: %s", retry_delay, exc
        )
        await asyncio.sleep(retry_delay)
        try:
            await ping(engine)
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as retry_exc:
            raise DatabaseUnavailableError(
                f"Error pinging database after retry: {retry_exc}"
            ) from retry_exc
    logger.info("Database connection successful!")


async def create_schema(engine: AsyncEngine) -> None:
    """Create missing tables and indexes; existing ones are left untouched."""
    # Imported for its side effect of registering the tables on Base.metadata.
    from paycor_sync.models import user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "DatabaseUnavailableError",
    "build_engine",
    "create_schema",
    "ping",
    "wait_for_database",
]
