from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gitnest.settings import get_settings


def create_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, future=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


_settings = get_settings()
engine: AsyncEngine = create_engine(_settings.database_url)
SessionMaker: async_sessionmaker[AsyncSession] = create_sessionmaker(engine)
