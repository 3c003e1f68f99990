from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.auth import optional_user
from gitnest.db import get_session
from gitnest.db.models import Repository, User
from gitnest.db.repos import OrganizationRepository, RepositoryRepository, UserRepository


@dataclass(frozen=True)
class RepoContext:
    owner: User
    repository: Repository


async def can_read_private_repo(session: AsyncSession, owner: User, viewer: User | None) -> bool:
    if viewer is None:
        return False
    if viewer.is_admin or viewer.id == owner.id:
        return True
    if owner.is_organization:
        return await OrganizationRepository(session).is_member(owner.id, viewer.id)
    return False


async def get_repo_context(
    session: AsyncSession,
    owner_name: str,
    repo_name: str,
    viewer: User | None,
) -> RepoContext:
    owner = await UserRepository(session).get_by_name(owner_name)
    if owner is None:
        raise HTTPException(status_code=404)

    repository = await RepositoryRepository(session).get_by_owner_and_name(owner.id, repo_name)
    if repository is None:
        raise HTTPException(status_code=404)

    # Private repositories are indistinguishable from missing ones for outsiders.
    if repository.is_private and not await can_read_private_repo(session, owner, viewer):
        raise HTTPException(status_code=404)

    return RepoContext(owner=owner, repository=repository)


async def repo_context(
    owner: str,
    repo: str,
    session: AsyncSession = Depends(get_session),
    current_user: User | None = Depends(optional_user),
) -> RepoContext:
    return await get_repo_context(session, owner, repo, current_user)
