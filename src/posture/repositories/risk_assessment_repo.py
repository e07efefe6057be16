"""Risk assessment repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from posture.db.models.risk_assessment import RiskAssessmentRow
from posture.repositories.base import BaseRepository


class RiskAssessmentRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, RiskAssessmentRow)

    async def get_by_service(self, service_name: str) -> RiskAssessmentRow | None:
        return await self.get_by_field("service_name", service_name)

    async def delete_for_service(self, service_name: str) -> None:
        row = await self.get_by_service(service_name)
        if row is not None:
            await self.delete(row)
