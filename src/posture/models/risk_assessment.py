"""Pydantic models for service risk assessments."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from posture.models.common import CamelModel

Impact = Literal["high", "medium", "low"]
YesNo = Literal["yes", "no"]


class RiskFactors(CamelModel):
    data_classification: Literal["sensitive-regulated", "restricted", "confidential", "public"] | None = None
    phi: YesNo | None = None
    eligibility_data: YesNo | None = None
    confidentiality_impact: Impact | None = None
    integrity_impact: Impact | None = None
    availability_impact: Impact | None = None
    public_endpoint: YesNo | None = None
    discoverability: Impact | None = None
    awareness: Impact | None = None


class RiskAssessmentInput(RiskFactors):
    service_name: str = Field(..., min_length=1, max_length=200)


class RiskAssessment(RiskAssessmentInput):
    id: int
    data_classification_score: int
    cia_triad_score: int
    attack_surface_score: int
    final_risk_score: float
    risk_level: str
    last_updated: datetime | None = None
    updated_by: str | None = None

    model_config = {"from_attributes": True}

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
