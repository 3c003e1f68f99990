from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gitnest.db.models import Repository
from gitnest.db.repos.base import BaseRepository


@dataclass(frozen=True)
class SearchRepoOptions:
    owner_id: uuid.UUID
    include_private: bool = False
    lower_names: list[str] = field(default_factory=list)
    page: int = 1
    page_size: int = 50


class RepositoryRepository(BaseRepository[Repository]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Repository)

    async def get_by_owner_and_name(self, owner_id: uuid.UUID, name: str) -> Repository | None:
        return await self.first_where(
            Repository.owner_id == owner_id,
            Repository.lower_name == name.strip().lower(),
        )

    async def get_user_repositories(self, opts: SearchRepoOptions) -> tuple[list[Repository], int]:
        """Return one page of the owner's repositories (newest update first) and the total."""
        predicates = [Repository.owner_id == opts.owner_id]
        if not opts.include_private:
            predicates.append(Repository.is_private.is_(False))
        if opts.lower_names:
            predicates.append(Repository.lower_name.in_(opts.lower_names))

        total = int(
            (
                await self.session.execute(
                    select(func.count()).select_from(Repository).where(*predicates)
                )
            ).scalar_one()
        )

        page = max(opts.page, 1)
        result = await self.session.execute(
            select(Repository)
            .options(selectinload(Repository.base_repo))
            .where(*predicates)
            .order_by(Repository.updated_at.desc(), Repository.lower_name.asc())
            .offset((page - 1) * opts.page_size)
            .limit(opts.page_size)
        )
        return list(result.scalars().all()), total

    async def update_owner_names(self, owner_id: uuid.UUID, owner_name: str) -> None:
        await self.session.execute(
            update(Repository)
            .where(Repository.owner_id == owner_id)
            .values(owner_name=owner_name)
        )
