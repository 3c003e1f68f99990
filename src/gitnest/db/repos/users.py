from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.db.models import User, UserType
from gitnest.db.repos.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_id(self, user_id: uuid.UUID) -> User | None:
        return await self.get(user_id)

    async def get_by_name(self, name: str) -> User | None:
        """Look up a user or organization by case-insensitive name."""
        lower_name = name.strip().lower()
        result = await self.session.execute(select(User).where(User.lower_name == lower_name))
        return result.scalar_one_or_none()

    async def get_individual_by_email(self, email: str) -> User | None:
        normalized = email.strip().lower()
        result = await self.session.execute(
            select(User).where(User.email == normalized, User.type == UserType.individual)
        )
        return result.scalar_one_or_none()

    async def name_exists(self, name: str, *, exclude_id: uuid.UUID | None = None) -> bool:
        predicates = [User.lower_name == name.strip().lower()]
        if exclude_id is not None:
            predicates.append(User.id != exclude_id)
        return await self.count_where(*predicates) > 0

    async def email_used(self, email: str, *, exclude_id: uuid.UUID | None = None) -> bool:
        predicates = [User.email == email.strip().lower()]
        if exclude_id is not None:
            predicates.append(User.id != exclude_id)
        return await self.count_where(*predicates) > 0
