"""Applications (services) table."""

from sqlalchemy import Boolean, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from posture.db.base import Base, TimestampMixin


class ApplicationRow(Base, TimestampMixin):
    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    risk_score: Mapped[str] = mapped_column(String(8), nullable=False, default="0.0")
    labels: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    has_alert: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    scan_engine: Mapped[str | None] = mapped_column(String(100), nullable=True)
    github_repo: Mapped[str | None] = mapped_column(Text, nullable=True)
    jira_project: Mapped[str | None] = mapped_column(Text, nullable=True)
    service_owner: Mapped[str | None] = mapped_column(Text, nullable=True)
    slack_channel: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    mend_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    crowdstrike_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    escape_url: Mapped[str | None] = mapped_column(Text, nullable=True)
