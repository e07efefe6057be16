"""Application (service) repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from posture.db.models.application import ApplicationRow
from posture.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ApplicationRow)

    async def get_by_name(self, name: str) -> ApplicationRow | None:
        return await self.get_by_field("name", name)
