"""
Database Module

Async SQLAlchemy engine, session factory and the declarative Base.

Every request gets its own AsyncSession through the get_db dependency;
background jobs open one with AsyncSessionLocal directly.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _engine_kwargs() -> dict:
    kwargs = {
        "echo": settings.SQLALCHEMY_ECHO,
        "pool_pre_ping": True,
    }
    # SQLite (tests, local runs) has no server-side pool to size
    if not settings.DATABASE_URL.startswith("sqlite"):
        if settings.DB_POOL_MIN_SIZE:
            kwargs["pool_size"] = settings.DB_POOL_MIN_SIZE
        if settings.DB_POOL_MAX_SIZE:
            kwargs["max_overflow"] = max(
                0, settings.DB_POOL_MAX_SIZE - (settings.DB_POOL_MIN_SIZE or 5)
            )
    return kwargs


engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs())

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields a database session.

    The session is closed when the request finishes; services commit
    explicitly at their durability boundaries.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_db_connection() -> bool:
    """Return True if the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
