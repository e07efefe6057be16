"""Service Registry: CRUD over service records.

Findings are joined to services by ``name`` at read time, so the name is
unique and is the only key the aggregator ever sees.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from posture.db.models.application import ApplicationRow
from posture.errors.exceptions import ConflictError, NotFoundError
from posture.models.service import Service, ServiceCreate, ServiceUpdate
from posture.repositories.application_repo import ApplicationRepository
from posture.repositories.risk_assessment_repo import RiskAssessmentRepository

logger = logging.getLogger(__name__)


class ServiceRegistry:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ApplicationRepository(session)

    async def list(self) -> list[Service]:
        rows = await self.repo.list_all()
        return [Service.model_validate(row) for row in rows]

    async def get(self, service_id: int) -> Service:
        return Service.model_validate(await self._get_row(service_id))

    async def get_by_name(self, name: str) -> Service:
        row = await self.repo.get_by_name(name)
        if row is None:
            raise NotFoundError("Service", name)
        return Service.model_validate(row)

    async def create(self, data: ServiceCreate) -> Service:
        if await self.repo.get_by_name(data.name) is not None:
            raise ConflictError(f"Service '{data.name}' already exists")

        fields = data.model_dump(exclude_none=True)
        fields.setdefault("labels", [])
        fields.setdefault("tags", [])
        row = await self.repo.create(**fields)
        await self.session.commit()
        logger.info("service_created", extra={"service_id": row.id, "service_name": row.name})
        return Service.model_validate(row)

    async def update(self, service_id: int, data: ServiceUpdate) -> Service:
        row = await self._get_row(service_id)
        changes = data.model_dump(exclude_unset=True)

        new_name = changes.get("name")
        if new_name is not None and new_name != row.name:
            if await self.repo.get_by_name(new_name) is not None:
                raise ConflictError(f"Service '{new_name}' already exists")
        # Nullable columns accept None, the list and flag columns do not.
        for key in ("name", "risk_score", "labels", "tags", "has_alert"):
            if key in changes and changes[key] is None:
                del changes[key]

        await self.repo.update(row, **changes)
        await self.session.commit()
        return Service.model_validate(row)

    async def delete(self, service_id: int) -> Service:
        """Delete a service and its risk assessment; return the service as it was.

        Scan findings are kept: they belong to the scanners, not the registry.
        """
        row = await self._get_row(service_id)
        deleted = Service.model_validate(row)
        await RiskAssessmentRepository(self.session).delete_for_service(deleted.name)
        await self.repo.delete(row)
        await self.session.commit()
        logger.info("service_deleted", extra={"service_id": service_id, "service_name": deleted.name})
        return deleted

    async def _get_row(self, service_id: int) -> ApplicationRow:
        row = await self.repo.get(service_id)
        if row is None:
            raise NotFoundError("Service", service_id)
        return row
