"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from posture.db.models.application import ApplicationRow
from posture.db.models.finding import ScanFindingRow
from posture.db.models.risk_assessment import RiskAssessmentRow
from posture.db.models.user import ActivityLogRow, UserRow

__all__ = [
    "ApplicationRow",
    "ScanFindingRow",
    "RiskAssessmentRow",
    "UserRow",
    "ActivityLogRow",
]
