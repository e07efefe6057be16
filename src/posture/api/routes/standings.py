"""Aggregated findings and percentile standing for registered services."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from posture.dependencies import get_current_user, get_db, get_findings_collector
from posture.errors.exceptions import ValidationError
from posture.integrations.service import FindingsCollector
from posture.services.aggregation import aggregate_for_service
from posture.services.percentile import RankingBasis, rank_services, standing_for
from posture.services.registry import ServiceRegistry
from posture.services.standings import parse_source_selection, peer_values, records_for_service

router = APIRouter(tags=["Standings"])


@router.get("/services/standings")
async def all_standings(
    basis: RankingBasis = Query(RankingBasis.FINDINGS),
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> list[dict]:
    """Percentile and tier of every registered service, best first."""
    services = await ServiceRegistry(db).list()
    values = await peer_values(collector, services, basis)
    standings = rank_services(values, basis)
    rows = [
        {
            "id": service.id,
            "name": service.name,
            "basis": basis.value,
            "value": values[service.name],
            **standings[service.name].to_dict(),
        }
        for service in services
    ]
    rows.sort(key=lambda row: (-row["rawPercentile"], row["name"]))
    return rows


@router.get("/services/{service_id}/findings")
async def service_findings(
    service_id: int,
    sources: str | None = Query(None, description="Comma-separated source keys; empty selects none"),
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> dict:
    """Findings tally for one service over the selected sources, with a per-source breakdown."""
    service = await ServiceRegistry(db).get(service_id)
    try:
        selection = parse_source_selection(sources)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    findings = await collector.collect(selection)
    own = records_for_service(findings, service.name)
    return {
        "serviceId": service.id,
        "serviceName": service.name,
        "sourcesSelected": bool(findings),
        "sources": [key.value for key in findings],
        "findings": aggregate_for_service(own.values(), service.name).to_dict(),
        "bySource": {
            key.value: aggregate_for_service([records], service.name).to_dict()
            for key, records in own.items()
        },
    }


@router.get("/services/{service_id}/standing")
async def service_standing(
    service_id: int,
    basis: RankingBasis = Query(RankingBasis.FINDINGS),
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> dict:
    registry = ServiceRegistry(db)
    service = await registry.get(service_id)
    services = await registry.list()
    values = await peer_values(collector, services, basis)

    standing = standing_for(values[service.name], list(values.values()), basis)
    return {
        "serviceId": service.id,
        "serviceName": service.name,
        "basis": basis.value,
        "value": values[service.name],
        "peerCount": len(values),
        **standing.to_dict(),
    }
