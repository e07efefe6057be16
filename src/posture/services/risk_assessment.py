"""Risk assessment factor scoring and persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from posture.db.base import utcnow
from posture.errors.exceptions import NotFoundError
from posture.models.risk_assessment import RiskAssessment, RiskAssessmentInput, RiskFactors
from posture.repositories.application_repo import ApplicationRepository
from posture.repositories.risk_assessment_repo import RiskAssessmentRepository

logger = logging.getLogger(__name__)

_CLASSIFICATION_POINTS = {
    "sensitive-regulated": 4,
    "restricted": 3,
    "confidential": 2,
}

_LEVEL_POINTS = {"high": 3, "medium": 2}


@dataclass(frozen=True)
class AssessmentScores:
    data_classification_score: int
    cia_triad_score: int
    attack_surface_score: int
    final_risk_score: float
    risk_level: str


def _level(value: str | None) -> int:
    return _LEVEL_POINTS.get((value or "").lower(), 1)


def _yes(value: str | None) -> bool:
    return (value or "").lower() == "yes"


def risk_level_for_score(score: float) -> str:
    if score >= 8:
        return "Critical"
    if score >= 6:
        return "High"
    if score >= 4:
        return "Medium"
    return "Low"


def score_factors(factors: RiskFactors) -> AssessmentScores:
    data_score = _CLASSIFICATION_POINTS.get((factors.data_classification or "").lower(), 1)
    if _yes(factors.phi):
        data_score += 3
    if _yes(factors.eligibility_data):
        data_score += 2

    cia_score = (
        _level(factors.confidentiality_impact)
        + _level(factors.integrity_impact)
        + _level(factors.availability_impact)
    )

    attack_score = 3 if _yes(factors.public_endpoint) else 0
    attack_score += _level(factors.discoverability) + _level(factors.awareness)

    mean = Decimal(data_score + cia_score + attack_score) / 3
    final = float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

    return AssessmentScores(
        data_classification_score=data_score,
        cia_triad_score=cia_score,
        attack_surface_score=attack_score,
        final_risk_score=final,
        risk_level=risk_level_for_score(final),
    )


async def save_assessment(
    session: AsyncSession,
    data: RiskAssessmentInput,
    updated_by: str,
) -> RiskAssessment:
    """Create or replace the assessment for a service and copy its score onto the service.

    Scores are always recomputed here; any client-supplied score is ignored.
    """
    service = await ApplicationRepository(session).get_by_name(data.service_name)
    if service is None:
        raise NotFoundError("Service", data.service_name)

    scores = score_factors(data)
    repo = RiskAssessmentRepository(session)
    fields = {
        **data.model_dump(),
        "data_classification_score": scores.data_classification_score,
        "cia_triad_score": scores.cia_triad_score,
        "attack_surface_score": scores.attack_surface_score,
        "final_risk_score": scores.final_risk_score,
        "risk_level": scores.risk_level,
        "last_updated": utcnow(),
        "updated_by": updated_by,
    }

    row = await repo.get_by_service(data.service_name)
    if row is None:
        row = await repo.create(**fields)
    else:
        await repo.update(row, **fields)

    service.risk_score = f"{scores.final_risk_score:.1f}"
    await session.commit()
    logger.info(
        "risk_assessment_saved",
        extra={"service_name": data.service_name, "final_risk_score": scores.final_risk_score},
    )
    return RiskAssessment.model_validate(row)
