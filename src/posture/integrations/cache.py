"""Per-endpoint TTL cache for fetched finding lists."""

from __future__ import annotations

import time
from collections.abc import Callable

from posture.integrations.normalized import FindingRecord, SourceKey


class FindingsCache:
    """Finding lists keyed by endpoint path (``mend/sca``, ...).

    One instance lives on ``app.state`` and is handed to the collector
    explicitly. A ``ttl_seconds`` of 0 disables caching.
    """

    def __init__(self, ttl_seconds: float = 30, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, list[FindingRecord]]] = {}

    def get(self, source_key: SourceKey) -> list[FindingRecord] | None:
        path = SourceKey(source_key).path
        entry = self._entries.get(path)
        if entry is None:
            return None
        stored_at, records = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[path]
            return None
        return list(records)

    def put(self, source_key: SourceKey, records: list[FindingRecord]) -> None:
        if self.ttl_seconds <= 0:
            return
        self._entries[SourceKey(source_key).path] = (self._clock(), list(records))

    def invalidate(self, source_key: SourceKey | None = None) -> None:
        """Drop one source's entry, or every entry when no source is given."""
        if source_key is None:
            self._entries.clear()
        else:
            self._entries.pop(SourceKey(source_key).path, None)

    def __len__(self) -> int:
        return len(self._entries)
