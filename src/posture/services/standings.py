"""Peer-set assembly for percentile standings.

Bridges the registry and the findings collector to the pure functions in
``posture.services.aggregation`` and ``posture.services.percentile``.
"""

from __future__ import annotations

from collections.abc import Iterable

from posture.integrations.normalized import FindingRecord, SourceKey
from posture.integrations.service import FindingsCollector
from posture.models.service import Service
from posture.services.aggregation import SeverityTally, aggregate_findings
from posture.services.percentile import RankingBasis


def parse_source_selection(raw: str | None) -> list[SourceKey] | None:
    """Parse a comma-separated ``sources`` parameter.

    ``None`` (parameter absent) selects every source. An empty string is an
    explicit empty selection. Entries may be keys (``mend_sca``) or paths
    (``mend/sca``).

    Raises:
        ValueError: an entry names no known source.
    """
    if raw is None:
        return None
    keys: list[SourceKey] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            key = SourceKey(part) if "/" not in part else SourceKey.from_path(part)
        except ValueError as exc:
            raise ValueError(f"Unknown findings source: {part}") from exc
        if key not in keys:
            keys.append(key)
    return keys


async def findings_tallies(
    collector: FindingsCollector,
    services: Iterable[Service],
    keys: Iterable[SourceKey] | None = None,
) -> dict[str, SeverityTally]:
    """Tally per registered service over the selected sources."""
    findings = await collector.collect(keys)
    return aggregate_findings(findings.values(), [service.name for service in services])


async def peer_values(
    collector: FindingsCollector,
    services: list[Service],
    basis: RankingBasis,
) -> dict[str, float]:
    """The scalar each service is ranked on, keyed by service name."""
    if RankingBasis(basis) is RankingBasis.RISK:
        return {service.name: float(service.risk_score) for service in services}
    tallies = await findings_tallies(collector, services)
    return {name: tally.total for name, tally in tallies.items()}


def records_for_service(
    findings: dict[SourceKey, list[FindingRecord]],
    service_name: str,
) -> dict[SourceKey, list[FindingRecord]]:
    return {
        key: [record for record in records if record.service_name == service_name]
        for key, records in findings.items()
    }
