"""Pydantic models for service (application) records."""

from decimal import Decimal, InvalidOperation

from pydantic import Field, field_validator

from posture.models.common import CamelModel


def _check_risk_score(value: str | None) -> str | None:
    if value is None:
        return value
    try:
        score = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError("riskScore must be a decimal string") from exc
    if not score.is_finite() or score < 0 or score > 10:
        raise ValueError("riskScore must be between 0.0 and 10.0")
    return f"{score:.1f}"


def _check_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("name must not be blank")
    return value


class _ServiceFields(CamelModel):
    labels: list[str] | None = None
    tags: list[str] | None = None
    has_alert: bool | None = None
    scan_engine: str | None = Field(None, max_length=100)
    github_repo: str | None = None
    jira_project: str | None = None
    service_owner: str | None = None
    slack_channel: str | None = None
    description: str | None = Field(None, max_length=5000)
    mend_url: str | None = None
    crowdstrike_url: str | None = None
    escape_url: str | None = None


class ServiceCreate(_ServiceFields):
    name: str = Field(..., min_length=1, max_length=200)
    risk_score: str = "0.0"

    @field_validator("risk_score", mode="before")
    @classmethod
    def validate_risk_score(cls, value):
        return _check_risk_score(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _check_name(value)


class ServiceUpdate(_ServiceFields):
    """Partial update; only fields present in the request are applied."""

    name: str | None = Field(None, min_length=1, max_length=200)
    risk_score: str | None = None

    @field_validator("risk_score", mode="before")
    @classmethod
    def validate_risk_score(cls, value):
        return _check_risk_score(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        return None if value is None else _check_name(value)


class Service(_ServiceFields):
    id: int
    name: str
    risk_score: str
    labels: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    has_alert: bool = False

    model_config = {"from_attributes": True}

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
