"""Findings source backed by the local ``scan_findings`` table."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from posture.integrations.adapters.base import FindingsSource
from posture.integrations.normalized import FindingRecord, SourceKey
from posture.repositories.finding_repo import ScanFindingRepository, row_to_record


class DatabaseFindingsSource(FindingsSource):
    """Reads findings through the repository layer.

    Each fetch opens its own session: an ``AsyncSession`` must not be shared
    between concurrently running fetches.
    """

    source_type: str = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def fetch(self, source_key: SourceKey) -> list[FindingRecord]:
        async with self.session_factory() as session:
            rows = await ScanFindingRepository(session).list_by_source(source_key)
            return [row_to_record(row) for row in rows]
