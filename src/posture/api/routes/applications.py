"""Service Registry routes and the merged service views."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from posture.dependencies import get_current_user, get_db, get_findings_collector, require_role
from posture.integrations.service import FindingsCollector
from posture.models.risk_assessment import RiskAssessment
from posture.models.service import ServiceCreate, ServiceUpdate
from posture.repositories.risk_assessment_repo import RiskAssessmentRepository
from posture.services.activity import ActivityAction, log_activity
from posture.services.registry import ServiceRegistry
from posture.services.standings import findings_tallies

router = APIRouter(tags=["Applications"])


@router.get("/applications")
async def list_applications(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    return [service.to_api() for service in await ServiceRegistry(db).list()]


@router.post("/applications", status_code=201)
async def create_application(
    body: ServiceCreate,
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = await ServiceRegistry(db).create(body)
    await log_activity(
        db, user, ActivityAction.CREATE_SERVICE, service.name,
        f"Created new service: {service.name}",
    )
    return service.to_api()


@router.get("/applications/{service_id}")
async def get_application(
    service_id: int,
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return (await ServiceRegistry(db).get(service_id)).to_api()


@router.patch("/applications/{service_id}")
async def update_application(
    service_id: int,
    body: ServiceUpdate,
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = await ServiceRegistry(db).update(service_id, body)
    changed = ", ".join(sorted(body.model_dump(exclude_unset=True, by_alias=True)))
    await log_activity(
        db, user, ActivityAction.UPDATE_SERVICE, service.name,
        f"Updated service: {service.name} ({changed})",
    )
    return service.to_api()


@router.delete("/applications/{service_id}")
async def delete_application(
    service_id: int,
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    deleted = await ServiceRegistry(db).delete(service_id)
    await log_activity(
        db, user, ActivityAction.DELETE_SERVICE, deleted.name,
        f"Deleted service: {deleted.name}",
    )
    return {"success": True, "message": "Application deleted successfully"}


@router.get("/applications-with-risk")
async def applications_with_risk(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    """Services merged with their risk assessment, when one exists."""
    services = await ServiceRegistry(db).list()
    assessments = await _assessments_by_service(db)

    merged = []
    for service in services:
        item = service.to_api()
        assessment = assessments.get(service.name)
        if assessment is not None:
            item["riskScore"] = f"{assessment.final_risk_score:.1f}"
            item["riskLevel"] = assessment.risk_level
            item["riskAssessment"] = assessment.to_api()
        merged.append(item)
    return merged


@router.get("/services-with-risk-scores")
async def services_with_risk_scores(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    services = await ServiceRegistry(db).list()
    assessments = await _assessments_by_service(db)
    return [
        {
            "id": service.id,
            "name": service.name,
            "finalRiskScore": assessments[service.name].final_risk_score if service.name in assessments else 0,
            "riskLevel": assessments[service.name].risk_level if service.name in assessments else "Low",
            "scanEngine": service.scan_engine or "Risk Assessment",
            "labels": service.labels,
            "tags": service.tags,
        }
        for service in services
    ]


@router.get("/services-total-findings")
async def services_total_findings(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> list[dict]:
    """Every registered service with its findings summed across all sources."""
    services = await ServiceRegistry(db).list()
    tallies = await findings_tallies(collector, services)
    return [
        {
            "id": service.id,
            "name": service.name,
            "totalFindings": tallies[service.name].total,
            "critical": tallies[service.name].critical,
            "high": tallies[service.name].high,
            "medium": tallies[service.name].medium,
            "low": tallies[service.name].low,
            "riskScore": service.risk_score,
            "tags": service.tags,
        }
        for service in services
    ]


async def _assessments_by_service(db: AsyncSession) -> dict[str, RiskAssessment]:
    rows = await RiskAssessmentRepository(db).list_all()
    return {row.service_name: RiskAssessment.model_validate(row) for row in rows}
