"""Repository for users and the activity log."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from posture.db.base import utcnow
from posture.db.models.user import ActivityLogRow, UserRow
from posture.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, UserRow)

    async def get_by_username(self, username: str) -> UserRow | None:
        return await self.get_by_field("username", username)

    async def update_last_login(self, user: UserRow) -> None:
        user.last_login = utcnow()
        await self.session.flush()

    async def delete_many(self, user_ids: list[int]) -> int:
        result = await self.session.execute(delete(UserRow).where(UserRow.id.in_(user_ids)))
        await self.session.flush()
        return result.rowcount or 0

    async def count_by(self, field: str) -> dict[str, int]:
        column = getattr(UserRow, field)
        result = await self.session.execute(select(column, func.count(UserRow.id)).group_by(column))
        return {value: count for value, count in result.all()}


class ActivityLogRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ActivityLogRow)

    async def list_recent(self, limit: int = 50) -> list[ActivityLogRow]:
        stmt = (
            select(ActivityLogRow)
            .order_by(ActivityLogRow.timestamp.desc(), ActivityLogRow.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
