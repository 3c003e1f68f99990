from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from gitnest.db.models import LFSMetaObject
from gitnest.db.repos.base import BaseRepository


class LFSMetaObjectRepository(BaseRepository[LFSMetaObject]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, LFSMetaObject)

    async def get_by_oid(self, repository_id: uuid.UUID, oid: str) -> LFSMetaObject | None:
        if not oid:
            return None
        return await self.first_where(
            LFSMetaObject.repository_id == repository_id,
            LFSMetaObject.oid == oid,
        )
