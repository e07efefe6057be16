"""FindingsCollector: fetches the selected sources concurrently, failing open."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from posture.config import Settings
from posture.integrations.adapters import AVAILABLE_SOURCES, import_source
from posture.integrations.adapters.base import FindingsSource
from posture.integrations.cache import FindingsCache
from posture.integrations.normalized import FindingRecord, SourceKey

logger = logging.getLogger(__name__)


class FindingsCollector:
    """Gathers finding lists for a set of source keys.

    A source that raises contributes an empty list and is not cached, so
    the next request retries it.
    """

    def __init__(self, source: FindingsSource, cache: FindingsCache | None = None):
        self.source = source
        self.cache = cache

    async def collect(
        self,
        keys: Iterable[SourceKey] | None = None,
    ) -> dict[SourceKey, list[FindingRecord]]:
        selected = list(dict.fromkeys(SourceKey(k) for k in keys)) if keys is not None else list(SourceKey)
        results = await asyncio.gather(*(self._fetch_one(key) for key in selected))
        return dict(zip(selected, results))

    async def collect_one(self, key: SourceKey) -> list[FindingRecord]:
        return (await self.collect([key]))[SourceKey(key)]

    async def _fetch_one(self, key: SourceKey) -> list[FindingRecord]:
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        try:
            records = await self.source.fetch(key)
        except Exception:
            logger.warning(
                "Findings source %s failed for %s; treating as empty",
                self.source.source_type,
                key.value,
                exc_info=True,
            )
            return []
        if self.cache is not None:
            self.cache.put(key, records)
        return records


def build_findings_source(settings: Settings, session_factory) -> FindingsSource:
    """Instantiate the configured findings backend."""
    backend = settings.findings_backend
    if backend not in AVAILABLE_SOURCES:
        raise ValueError(f"Unknown findings backend: {backend}")

    source_cls = import_source(AVAILABLE_SOURCES[backend])
    if backend == "remote":
        if not settings.remote_findings_url:
            raise ValueError("POSTURE_REMOTE_FINDINGS_URL is required for the remote findings backend")
        return source_cls(
            settings.remote_findings_url,
            token_env=settings.remote_findings_token_env,
            timeout=settings.remote_findings_timeout,
        )
    return source_cls(session_factory)
