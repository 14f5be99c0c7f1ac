# src/ejournal/db/session.py
from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from ejournal.core.config import Settings

# ---------------------------------------------------------------------------
# Engine configuration
# ---------------------------------------------------------------------------


def build_engine(settings: Settings) -> AsyncEngine:
    """Build the async engine for ``settings.DATABASE_URL``.

    In-memory SQLite (tests) must share one connection across the whole app,
    so it gets a StaticPool; TESTING against a real server uses NullPool to
    avoid handing one asyncpg connection to several event loops.
    """
    kwargs: dict = {"echo": settings.DB_ECHO}
    if settings.is_sqlite:
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True
        if settings.TESTING:
            kwargs["poolclass"] = NullPool
    return create_async_engine(settings.DATABASE_URL, **kwargs)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


def get_sessionmaker(request: Request) -> async_sessionmaker[AsyncSession]:
    """Return the app-scoped sessionmaker built in the lifespan."""
    return request.app.state.async_sessionmaker


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with get_sessionmaker(request)() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
