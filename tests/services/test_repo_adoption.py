from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.db.models import User
from gitnest.db.repos import UserRepository
from gitnest.errors import NameReservedError, RepoAlreadyExistError, RepoDirNotExistError
from gitnest.services.repo_adoption import (
    adopt_repository,
    delete_unadopted_repository,
    list_user_repo_dirs,
    unadopted_dir_exists,
)
from gitnest.testing.git_test_helpers import init_bare_repo


def test_list_user_repo_dirs_pages_in_name_order(repo_root: Path) -> None:
    for name in ("charlie", "alpha", "bravo"):
        init_bare_repo(repo_root, "alice", name)
    (repo_root / "alice" / "Upper.git").mkdir()
    (repo_root / "alice" / "plain-dir").mkdir()
    (repo_root / "alice" / "notes.git.txt").write_text("x")

    assert list_user_repo_dirs("Alice", 0, 10) == (["alpha", "bravo", "charlie"], 3)
    assert list_user_repo_dirs("alice", 1, 2) == (["bravo"], 3)
    assert list_user_repo_dirs("nobody", 0, 10) == ([], 0)


async def _alice(session: AsyncSession) -> User:
    user = User(name="alice", lower_name="alice", email="alice@example.com")
    await UserRepository(session).add(user)
    await session.commit()
    return user


@pytest.mark.asyncio
async def test_adopt_then_refuse_second_adoption(
    db_session: AsyncSession, repo_root: Path
) -> None:
    alice = await _alice(db_session)
    init_bare_repo(repo_root, "alice", "orphan")
    assert unadopted_dir_exists(alice, "orphan")

    repo = await adopt_repository(db_session, alice, "orphan")
    assert repo.is_private
    assert repo.full_name == "alice/orphan"

    with pytest.raises(RepoAlreadyExistError):
        await adopt_repository(db_session, alice, "orphan")
    with pytest.raises(RepoAlreadyExistError):
        await delete_unadopted_repository(db_session, alice, "orphan")
    assert (repo_root / "alice" / "orphan.git").is_dir()


@pytest.mark.asyncio
async def test_adopt_requires_directory_and_valid_name(db_session: AsyncSession) -> None:
    alice = await _alice(db_session)

    with pytest.raises(RepoDirNotExistError):
        await adopt_repository(db_session, alice, "ghost")
    with pytest.raises(NameReservedError):
        await adopt_repository(db_session, alice, "..")


@pytest.mark.asyncio
async def test_delete_unadopted_removes_directory(
    db_session: AsyncSession, repo_root: Path
) -> None:
    alice = await _alice(db_session)
    path = init_bare_repo(repo_root, "alice", "orphan")

    await delete_unadopted_repository(db_session, alice, "orphan")
    assert not path.exists()
    assert not unadopted_dir_exists(alice, "orphan")

    with pytest.raises(RepoDirNotExistError):
        await delete_unadopted_repository(db_session, alice, "orphan")
