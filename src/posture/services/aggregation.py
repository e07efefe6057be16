"""Cross-source findings aggregation.

Everything here is pure: callers fetch the source lists first (see
``posture.integrations.service``) and pass them in. A source that failed
or was not fetched is simply absent or empty and contributes nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date

from posture.integrations.normalized import FindingRecord, ScanEngine, SourceKey


@dataclass(frozen=True)
class SeverityTally:
    """Summed severity counts for one service (or one engine)."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    latest_scan: date | None = None

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low

    def __add__(self, other: SeverityTally) -> SeverityTally:
        return SeverityTally(
            critical=self.critical + other.critical,
            high=self.high + other.high,
            medium=self.medium + other.medium,
            low=self.low + other.low,
            latest_scan=_latest(self.latest_scan, other.latest_scan),
        )

    @classmethod
    def from_record(cls, record: FindingRecord) -> SeverityTally:
        return cls(
            critical=record.critical,
            high=record.high,
            medium=record.medium,
            low=record.low,
            latest_scan=record.scan_date,
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "C": self.critical,
            "H": self.high,
            "M": self.medium,
            "L": self.low,
            "lastScan": self.latest_scan.isoformat() if self.latest_scan else None,
        }


ZERO_TALLY = SeverityTally()


def _latest(a: date | None, b: date | None) -> date | None:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def aggregate_findings(
    sources: Iterable[Iterable[FindingRecord]],
    service_names: Iterable[str] | None = None,
) -> dict[str, SeverityTally]:
    """Sum finding records from every source list into one tally per service name.

    With *service_names*, exactly those names are returned and a name with no
    matching records maps to the zero tally. Without it, every service seen in
    any source is returned. Keys are sorted so output does not depend on the
    order in which sources were supplied.
    """
    wanted = set(service_names) if service_names is not None else None
    tallies: dict[str, SeverityTally] = {}

    for records in sources:
        for record in records:
            if wanted is not None and record.service_name not in wanted:
                continue
            current = tallies.get(record.service_name, ZERO_TALLY)
            tallies[record.service_name] = current + SeverityTally.from_record(record)

    if wanted is not None:
        for name in wanted:
            tallies.setdefault(name, ZERO_TALLY)

    return {name: tallies[name] for name in sorted(tallies)}


def aggregate_for_service(
    sources: Iterable[Iterable[FindingRecord]],
    service_name: str,
) -> SeverityTally:
    """Tally for a single service; zero when no source mentions it."""
    return aggregate_findings(sources, [service_name])[service_name]


def aggregate_by_engine(
    findings_by_source: Mapping[SourceKey, Iterable[FindingRecord]],
) -> list[dict]:
    """Per-engine severity totals, always listing Mend, Escape and Crowdstrike in that order."""
    per_engine: dict[ScanEngine, SeverityTally] = {engine: ZERO_TALLY for engine in ScanEngine}
    for source_key, records in findings_by_source.items():
        engine = SourceKey(source_key).engine
        for record in records:
            per_engine[engine] = per_engine[engine] + SeverityTally.from_record(record)

    return [
        {
            "engine": engine.value,
            "critical": tally.critical,
            "high": tally.high,
            "medium": tally.medium,
            "low": tally.low,
        }
        for engine, tally in per_engine.items()
    ]


def top_services(tallies: Mapping[str, SeverityTally], limit: int = 5) -> list[dict]:
    """Services ranked by total findings (descending, ties broken by name)."""
    ranked = sorted(tallies.items(), key=lambda item: (-item[1].total, item[0]))
    return [
        {
            "name": name,
            "totalFindings": tally.total,
            "critical": tally.critical,
            "high": tally.high,
            "medium": tally.medium,
            "low": tally.low,
        }
        for name, tally in ranked[:limit]
    ]
