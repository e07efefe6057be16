"""Risk assessment routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from posture.dependencies import get_current_user, get_db, require_role
from posture.models.risk_assessment import RiskAssessment, RiskAssessmentInput
from posture.repositories.risk_assessment_repo import RiskAssessmentRepository
from posture.services.activity import ActivityAction, log_activity
from posture.services.risk_assessment import save_assessment

router = APIRouter(tags=["Risk Assessments"])


@router.get("/risk-assessments/{service_name}")
async def get_risk_assessment(
    service_name: str,
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict | None:
    """The service's assessment, or null when it has not been assessed."""
    row = await RiskAssessmentRepository(db).get_by_service(service_name)
    if row is None:
        return None
    return RiskAssessment.model_validate(row).to_api()


@router.post("/risk-assessments")
async def upsert_risk_assessment(
    body: RiskAssessmentInput,
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    assessment = await save_assessment(db, body, updated_by=user.get("username") or user["sub"])
    await log_activity(
        db, user, ActivityAction.UPDATE_RISK_SCORE, assessment.service_name,
        f"Updated risk assessment for {assessment.service_name} - "
        f"Final Risk Score: {assessment.final_risk_score}, Risk Level: {assessment.risk_level}",
    )
    return assessment.to_api()
