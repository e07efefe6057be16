"""Dashboard analytics over services, risk assessments and findings."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from posture.integrations.normalized import FindingRecord, SourceKey
from posture.services.aggregation import aggregate_findings
from posture.services.risk_assessment import risk_level_for_score

RISK_LEVELS = ("Critical", "High", "Medium", "Low")


def dashboard_metrics(
    service_count: int,
    findings_by_source: Mapping[SourceKey, Iterable[FindingRecord]],
    risk_scores: Iterable[float],
) -> dict:
    """Headline numbers: service count, critical and high findings, mean risk score."""
    tallies = aggregate_findings(findings_by_source.values())
    scores = [float(score or 0) for score in risk_scores]
    if scores:
        mean = Decimal(str(sum(scores))) / len(scores)
        average = float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    else:
        average = 0.0
    return {
        "totalApplications": service_count,
        "criticalFindings": sum(t.critical for t in tallies.values()),
        "highFindings": sum(t.high for t in tallies.values()),
        "averageRiskScore": average,
    }


def risk_distribution(risk_scores: Iterable[float]) -> list[dict]:
    """Count of assessed services per risk level; levels with no services are omitted."""
    counts = Counter(risk_level_for_score(float(score or 0)) for score in risk_scores)
    return [{"name": level, "value": counts[level]} for level in RISK_LEVELS if counts[level]]


def compliance_coverage(services: Iterable) -> list[dict]:
    """Services carrying each compliance tag, most covered tag first."""
    by_tag: dict[str, list[str]] = {}
    for service in services:
        for tag in service.tags or []:
            by_tag.setdefault(tag, []).append(service.name)
    ranked = sorted(by_tag.items(), key=lambda item: (-len(item[1]), item[0]))
    return [
        {"tag": tag, "coverage": len(names), "applications": sorted(names)}
        for tag, names in ranked
    ]
