"""Dashboard chart and summary endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from posture.dependencies import get_current_user, get_db, get_findings_collector
from posture.integrations.normalized import ScanEngine, SourceKey
from posture.integrations.service import FindingsCollector
from posture.repositories.risk_assessment_repo import RiskAssessmentRepository
from posture.services.aggregation import aggregate_by_engine, aggregate_findings, top_services
from posture.services.analytics import compliance_coverage, dashboard_metrics, risk_distribution
from posture.services.registry import ServiceRegistry
from posture.services.standings import findings_tallies

router = APIRouter(tags=["Dashboard"])


async def _risk_scores(db: AsyncSession) -> list[float]:
    return [row.final_risk_score for row in await RiskAssessmentRepository(db).list_all()]


@router.get("/dashboard/metrics")
async def metrics(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> dict:
    services = await ServiceRegistry(db).list()
    findings = await collector.collect()
    return dashboard_metrics(len(services), findings, await _risk_scores(db))


@router.get("/dashboard/risk-distribution")
async def get_risk_distribution(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    return risk_distribution(await _risk_scores(db))


@router.get("/dashboard/scan-engine-findings")
async def scan_engine_findings(
    user: dict = Depends(get_current_user),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> list[dict]:
    return aggregate_by_engine(await collector.collect())


@router.get("/dashboard/compliance")
async def compliance(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    return compliance_coverage(await ServiceRegistry(db).list())


@router.get("/dashboard/top-applications-total")
async def top_applications_total(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> list[dict]:
    """Top five registered services by findings across every source."""
    services = await ServiceRegistry(db).list()
    return top_services(await findings_tallies(collector, services))


async def _top_for_engine(collector: FindingsCollector, engine: ScanEngine) -> list[dict]:
    findings = await collector.collect(SourceKey.for_engine(engine))
    return top_services(aggregate_findings(findings.values()))


@router.get("/dashboard/top-applications-mend")
async def top_applications_mend(
    user: dict = Depends(get_current_user),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> list[dict]:
    return await _top_for_engine(collector, ScanEngine.MEND)


@router.get("/dashboard/top-applications-escape")
async def top_applications_escape(
    user: dict = Depends(get_current_user),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> list[dict]:
    return await _top_for_engine(collector, ScanEngine.ESCAPE)


@router.get("/dashboard/top-applications-crowdstrike")
async def top_applications_crowdstrike(
    user: dict = Depends(get_current_user),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> list[dict]:
    return await _top_for_engine(collector, ScanEngine.CROWDSTRIKE)
