from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.db.models import OrgUser, User, UserType, Visibility
from gitnest.db.repos.base import BaseRepository


@dataclass(frozen=True)
class FindOrgOptions:
    user_id: uuid.UUID | None = None
    # Also list private memberships and non-public organizations.
    include_private: bool = False
    page: int = 1
    page_size: int = 50


class OrganizationRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    def _filtered(self, stmt: Select, opts: FindOrgOptions) -> Select:  # type: ignore[type-arg]
        stmt = stmt.where(User.type == UserType.organization)
        if opts.user_id is not None:
            member_org_ids = select(OrgUser.org_id).where(OrgUser.user_id == opts.user_id)
            if not opts.include_private:
                member_org_ids = member_org_ids.where(OrgUser.is_public.is_(True))
            stmt = stmt.where(User.id.in_(member_org_ids))
        if not opts.include_private:
            stmt = stmt.where(User.visibility == Visibility.public)
        return stmt

    async def find_orgs(self, opts: FindOrgOptions) -> list[User]:
        page = max(opts.page, 1)
        stmt = (
            self._filtered(select(User), opts)
            .order_by(User.name.asc())
            .offset((page - 1) * opts.page_size)
            .limit(opts.page_size)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_orgs(self, opts: FindOrgOptions) -> int:
        stmt = self._filtered(select(func.count()).select_from(User), opts)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def is_member(self, org_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(func.count())
            .select_from(OrgUser)
            .where(OrgUser.org_id == org_id, OrgUser.user_id == user_id)
        )
        return int(result.scalar_one()) > 0

    async def add_member(
        self, org_id: uuid.UUID, user_id: uuid.UUID, *, is_public: bool = False
    ) -> OrgUser:
        membership = OrgUser(org_id=org_id, user_id=user_id, is_public=is_public)
        self.session.add(membership)
        await self.session.flush()
        return membership
