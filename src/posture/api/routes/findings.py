"""Per-source findings feeds: one GET and one ingest route per scanner category."""

import logging

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from posture.dependencies import get_current_user, get_db, get_findings_collector, require_role
from posture.integrations.normalized import SourceKey
from posture.integrations.records import normalize_record
from posture.integrations.service import FindingsCollector
from posture.repositories.finding_repo import ScanFindingRepository, row_to_record
from posture.services.activity import ActivityAction, log_activity

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Findings"])


def _list_route(source_key: SourceKey):
    async def list_findings(
        service_name: str | None = Query(None, alias="serviceName"),
        user: dict = Depends(get_current_user),
        collector: FindingsCollector = Depends(get_findings_collector),
    ) -> list[dict]:
        records = await collector.collect_one(source_key)
        if service_name:
            records = [r for r in records if r.service_name == service_name]
        return [record.to_api() for record in records]

    list_findings.__name__ = f"list_{source_key.value}_findings"
    return list_findings


def _ingest_route(source_key: SourceKey):
    async def ingest_finding(
        request: Request,
        payload: dict = Body(...),
        user: dict = Depends(require_role("admin")),
        db: AsyncSession = Depends(get_db),
    ) -> dict:
        record = normalize_record(source_key, payload)
        row = await ScanFindingRepository(db).upsert(record)
        await db.commit()
        request.app.state.findings_cache.invalidate(source_key)

        await log_activity(
            db, user, ActivityAction.INGEST_FINDINGS, record.service_name,
            f"Ingested {source_key.value} scan of {record.scan_date.isoformat()} ({record.total} findings)",
        )
        logger.info(
            "findings_ingested",
            extra={"source": source_key.value, "service_name": record.service_name},
        )
        return row_to_record(row).to_api()

    ingest_finding.__name__ = f"ingest_{source_key.value}_finding"
    return ingest_finding


for _key in SourceKey:
    router.add_api_route(f"/{_key.path}", _list_route(_key), methods=["GET"])
    router.add_api_route(f"/{_key.path}", _ingest_route(_key), methods=["POST"], status_code=201)
