"""Async engine, session factory and the per-request session dependency."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from synapse_capture.config import get_settings
from synapse_capture.infrastructure.database.base import Base

_ASYNC_DRIVERS = {
    "sqlite:///": "sqlite+aiosqlite:///",
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
}


def async_database_url(url: str) -> str:
    """Swap a plain database URL for its async-driver form.

    URLs that already name a driver are returned unchanged.
    """
    for prefix, async_prefix in _ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return url.replace(prefix, async_prefix, 1)
    return url


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url``.

    In-memory SQLite gets a single shared connection so every session sees
    the same database.
    """
    url = async_database_url(url)
    kwargs: dict = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
    return create_async_engine(url, **kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


async def create_tables(bind: AsyncEngine) -> None:
    """Create any missing tables for the registered ORM models."""
    # Registers ContentModel on Base.metadata
    from synapse_capture.infrastructure.database import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


settings = get_settings()
engine = build_engine(settings.database_url, echo=settings.database_echo)
async_session_factory = build_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, committed on success."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
