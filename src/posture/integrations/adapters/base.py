"""Abstract base class for findings sources."""

from __future__ import annotations

from abc import ABC, abstractmethod

from posture.integrations.normalized import FindingRecord, SourceKey


class FindingsSource(ABC):
    """Supplies the finding records of one scanner feed at a time."""

    source_type: str = "unknown"

    @abstractmethod
    async def fetch(self, source_key: SourceKey) -> list[FindingRecord]:
        """Return every finding record currently held for *source_key*.

        Implementations may raise on failure; the collector treats a raising
        source as empty.
        """
        ...
