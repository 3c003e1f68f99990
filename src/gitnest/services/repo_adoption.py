"""Repository directories on disk that have no database record ("unadopted")."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from gitnest.db.models import Repository, User
from gitnest.db.repos import RepositoryRepository
from gitnest.errors import GitnestError, RepoAlreadyExistError, RepoDirNotExistError
from gitnest.git import repo_path
from gitnest.logging_config import log_with_fields
from gitnest.naming import is_usable_repo_name
from gitnest.settings import get_settings

logger = logging.getLogger("gitnest.services.adoption")

_GIT_SUFFIX = ".git"


def _dir_repo_name(entry: Path) -> str | None:
    """The repository name for ``<name>.git`` directories that could be adopted."""
    if not entry.is_dir() or not entry.name.endswith(_GIT_SUFFIX):
        return None
    name = entry.name[: -len(_GIT_SUFFIX)]
    if name != name.lower():
        return None
    try:
        is_usable_repo_name(name)
    except GitnestError:
        return None
    return name


def list_user_repo_dirs(user_name: str, start: int, end: int) -> tuple[list[str], int]:
    """Walk ``<repo_root>/<user>`` in name order.

    Returns the repository names whose position falls in ``[start, end)`` and the
    number of candidate directories overall. A missing user directory is empty.
    """
    root = Path(get_settings().repo_root) / user_name.lower()
    if not root.is_dir():
        return [], 0

    names: list[str] = []
    count = 0
    for entry in sorted(root.iterdir(), key=lambda path: path.name):
        name = _dir_repo_name(entry)
        if name is None:
            continue
        if start <= count < end:
            names.append(name)
        count += 1
    return names, count


def unadopted_dir_exists(owner: User, name: str) -> bool:
    return repo_path(get_settings().repo_root, owner.name, name).is_dir()


async def adopt_repository(session: AsyncSession, owner: User, name: str) -> Repository:
    """Create the database record for an existing repository directory."""
    is_usable_repo_name(name)
    repos = RepositoryRepository(session)
    if await repos.get_by_owner_and_name(owner.id, name) is not None:
        raise RepoAlreadyExistError(owner.name, name)

    path = repo_path(get_settings().repo_root, owner.name, name)
    if not path.is_dir():
        raise RepoDirNotExistError(str(path))

    repo = Repository(
        owner_id=owner.id,
        owner_name=owner.name,
        name=name,
        lower_name=name.lower(),
        is_private=True,
    )
    await repos.add(repo)
    await session.commit()
    log_with_fields(logger, logging.INFO, "repository adopted", repo=repo.full_name)
    return repo


async def delete_unadopted_repository(session: AsyncSession, owner: User, name: str) -> None:
    """Remove a repository directory that no database record refers to."""
    is_usable_repo_name(name)
    if await RepositoryRepository(session).get_by_owner_and_name(owner.id, name) is not None:
        raise RepoAlreadyExistError(owner.name, name)

    path = repo_path(get_settings().repo_root, owner.name, name)
    if not path.is_dir():
        raise RepoDirNotExistError(str(path))

    await run_in_threadpool(shutil.rmtree, path)
    log_with_fields(
        logger, logging.INFO, "unadopted repository deleted", owner=owner.name, name=name
    )
