"""
Async database session management.
Challenge: Connection pooling, request-scoped transactions, proper cleanup.
Design: One session per request; commit once at the end so every board
operation is a single transaction.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from qaboard.config import get_settings
from qaboard.core.exceptions import StoreUnavailable
from qaboard.db.base import Base
from qaboard.db import models  # noqa: F401 - ensure models are registered

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(url: str) -> dict:
    """Pool sizing only applies to server databases; SQLite picks its own pool."""
    opts = {"echo": settings.debug, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        opts.update(pool_size=10, max_overflow=20)
    return opts


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# Session factory: one session per request
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create missing tables. Existing tables are left untouched."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping(session: AsyncSession) -> None:
    """Round-trip to the store; raises StoreUnavailable when it cannot be reached."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Store unavailable", {"operation": "ping"}) from exc


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session per request. Rollback on error, close on exit."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.warning("Transaction failed: %s", exc)
            raise StoreUnavailable("Store unavailable", {"operation": "commit"}) from exc
        except Exception:
            await session.rollback()
            raise


# Type alias for FastAPI dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
