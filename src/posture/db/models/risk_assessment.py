"""Risk assessments table, one row per service."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from posture.db.base import Base, TimestampMixin


class RiskAssessmentRow(Base, TimestampMixin):
    __tablename__ = "risk_assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    service_name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)

    data_classification: Mapped[str | None] = mapped_column(String(50), nullable=True)
    phi: Mapped[str | None] = mapped_column(String(10), nullable=True)
    eligibility_data: Mapped[str | None] = mapped_column(String(10), nullable=True)
    confidentiality_impact: Mapped[str | None] = mapped_column(String(10), nullable=True)
    integrity_impact: Mapped[str | None] = mapped_column(String(10), nullable=True)
    availability_impact: Mapped[str | None] = mapped_column(String(10), nullable=True)
    public_endpoint: Mapped[str | None] = mapped_column(String(10), nullable=True)
    discoverability: Mapped[str | None] = mapped_column(String(10), nullable=True)
    awareness: Mapped[str | None] = mapped_column(String(10), nullable=True)

    data_classification_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cia_triad_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attack_surface_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    final_risk_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    risk_level: Mapped[str] = mapped_column(String(20), nullable=False, default="Low")

    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(320), nullable=True)
