from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.db.models import UserSetting
from gitnest.db.repos.base import BaseRepository

SETTINGS_KEY_HIDDEN_COMMENT_TYPES = "issue.hidden_comment_types"


class UserSettingRepository(BaseRepository[UserSetting]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserSetting)

    async def get_value(self, user_id: uuid.UUID, key: str, default: str = "") -> str:
        result = await self.session.execute(
            select(UserSetting.setting_value).where(
                UserSetting.user_id == user_id,
                UserSetting.setting_key == key.lower(),
            )
        )
        value = result.scalar_one_or_none()
        return default if value is None else value

    async def set_value(self, user_id: uuid.UUID, key: str, value: str) -> UserSetting:
        existing = await self.first_where(
            UserSetting.user_id == user_id,
            UserSetting.setting_key == key.lower(),
        )
        if existing is not None:
            existing.setting_value = value
            await self.session.flush()
            return existing
        return await self.add(
            UserSetting(user_id=user_id, setting_key=key.lower(), setting_value=value)
        )
