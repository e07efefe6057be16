"""Peer percentile ranking and tier assignment.

A percentile here measures standing toward fewer findings or lower risk:
100 is the best posture in the peer set and 0 the worst. Both bases
compare the target against the whole peer set (the target included), so
tied services always share a percentile.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

# Returned when the peer set is just the target itself.
SOLE_MEMBER_PERCENTILE = 100.0


class Tier(str, Enum):
    PLATINUM = "Platinum"
    GOLD = "Gold"
    SILVER = "Silver"
    BRONZE = "Bronze"


class RankingBasis(str, Enum):
    FINDINGS = "findings"
    RISK = "risk"


def _share_worse(target: float, peers: Sequence[float]) -> float:
    """Percentage of *peers* with a strictly higher (worse) value than *target*."""
    if not peers:
        return 0.0
    if len(peers) == 1:
        return SOLE_MEMBER_PERCENTILE
    worse = sum(1 for value in peers if value > target)
    return worse * 100 / len(peers)


def findings_percentile(target_total: int, peer_totals: Sequence[int]) -> float:
    """Share of peers carrying strictly more total findings than the target."""
    return _share_worse(target_total, peer_totals)


def risk_percentile(target_score: float, peer_scores: Sequence[float]) -> float:
    """Share of peers with a strictly higher risk score than the target."""
    return _share_worse(target_score, peer_scores)


def display_percentile(value: float) -> int:
    """Round half up to a whole percentile for display."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def tier_for_percentile(percentile: float) -> Tier:
    if percentile >= 76:
        return Tier.PLATINUM
    if percentile >= 51:
        return Tier.GOLD
    if percentile >= 26:
        return Tier.SILVER
    return Tier.BRONZE


@dataclass(frozen=True)
class Standing:
    percentile: float
    rounded: int
    tier: Tier

    def to_dict(self) -> dict:
        return {
            "percentile": self.rounded,
            "rawPercentile": self.percentile,
            "tier": self.tier.value,
        }


def standing_for(target: float, peers: Sequence[float], basis: RankingBasis) -> Standing:
    """Percentile and tier for one member of a peer set.

    The tier is taken from the rounded percentile so it always agrees with
    the number shown next to it.
    """
    if RankingBasis(basis) is RankingBasis.FINDINGS:
        raw = findings_percentile(target, peers)
    else:
        raw = risk_percentile(target, peers)
    rounded = display_percentile(raw)
    return Standing(percentile=raw, rounded=rounded, tier=tier_for_percentile(rounded))


def rank_services(values: Mapping[str, float], basis: RankingBasis) -> dict[str, Standing]:
    """Standing of every service in a peer set keyed by service name."""
    peers = list(values.values())
    return {name: standing_for(value, peers, basis) for name, value in values.items()}
