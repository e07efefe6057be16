"""Scanner findings table shared by every source."""

from datetime import date

from sqlalchemy import Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from posture.db.base import Base, TimestampMixin


class ScanFindingRow(Base, TimestampMixin):
    __tablename__ = "scan_findings"
    __table_args__ = (
        UniqueConstraint("source", "service_name", "scan_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    service_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    scan_date: Mapped[date] = mapped_column(Date, nullable=False)
    critical: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    high: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    medium: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    low: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
