from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from youthbook.settings import get_settings


def create_engine(database_url: str, *, sqlite_busy_timeout_seconds: float = 30.0) -> AsyncEngine:
    connect_args: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        # Concurrent writers wait on the database lock instead of failing fast.
        connect_args["timeout"] = sqlite_busy_timeout_seconds
    return create_async_engine(database_url, future=True, connect_args=connect_args)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


_settings = get_settings()
engine: AsyncEngine = create_engine(
    _settings.database_url,
    sqlite_busy_timeout_seconds=_settings.sqlite_busy_timeout_seconds,
)
SessionMaker: async_sessionmaker[AsyncSession] = create_sessionmaker(engine)
