"""Scan findings repository."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from posture.db.models.finding import ScanFindingRow
from posture.integrations.normalized import FindingRecord, SourceKey
from posture.repositories.base import BaseRepository


class ScanFindingRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ScanFindingRow)

    async def list_by_source(self, source: SourceKey) -> list[ScanFindingRow]:
        stmt = (
            select(ScanFindingRow)
            .where(ScanFindingRow.source == SourceKey(source).value)
            .order_by(ScanFindingRow.service_name, ScanFindingRow.scan_date)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_scan(
        self, source: SourceKey, service_name: str, scan_date: date
    ) -> ScanFindingRow | None:
        stmt = select(ScanFindingRow).where(
            ScanFindingRow.source == SourceKey(source).value,
            ScanFindingRow.service_name == service_name,
            ScanFindingRow.scan_date == scan_date,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, record: FindingRecord) -> ScanFindingRow:
        """Insert a scan result, replacing the counts of an earlier report for the same scan."""
        counts = {
            "critical": record.critical,
            "high": record.high,
            "medium": record.medium,
            "low": record.low,
        }
        existing = await self.get_for_scan(record.source, record.service_name, record.scan_date)
        if existing is not None:
            return await self.update(existing, **counts)
        return await self.create(
            source=record.source.value,
            service_name=record.service_name,
            scan_date=record.scan_date,
            **counts,
        )


def row_to_record(row: ScanFindingRow) -> FindingRecord:
    return FindingRecord(
        id=row.id,
        source=SourceKey(row.source),
        service_name=row.service_name,
        scan_date=row.scan_date,
        critical=row.critical,
        high=row.high,
        medium=row.medium,
        low=row.low,
    )
