from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import gitnest.db as db
from gitnest.app import create_app
from gitnest.db.models import Base
from gitnest.git import last_commit_cache


@pytest.fixture(autouse=True)
def data_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "data"
    monkeypatch.setenv("GITNEST_REPO_ROOT", str(root / "repositories"))
    monkeypatch.setenv("GITNEST_LFS_CONTENT_PATH", str(root / "lfs"))
    monkeypatch.setenv("GITNEST_AVATAR_UPLOAD_PATH", str(root / "avatars"))
    monkeypatch.setenv("GITNEST_LOG_HTTP_REQUESTS", "false")
    last_commit_cache.clear()
    return root


@pytest.fixture
def repo_root(data_root: Path) -> Path:
    return data_root / "repositories"


@pytest.fixture
async def test_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    db_path = tmp_path / "test.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    db.SessionMaker = async_sessionmaker(engine, expire_on_commit=False)

    yield engine

    await engine.dispose()


@pytest.fixture
async def client(test_engine: AsyncEngine) -> AsyncIterator[AsyncClient]:
    _ = test_engine
    app = create_app()
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    _ = test_engine
    async with db.SessionMaker() as session:
        yield session
