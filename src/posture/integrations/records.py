"""Per-engine raw record types and the normalization step into FindingRecord.

Scanner exports are loosely typed: key casing differs between the REST
feeds and bulk exports, dates arrive as ISO or US-formatted strings, and
counts are sometimes numeric strings. Each engine gets its own tagged
record model so the differences stay explicit, and ``normalize_record``
is the only way raw payloads reach the aggregator.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from posture.errors.exceptions import ValidationError
from posture.integrations.normalized import FindingRecord, SourceKey

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%Y, %H:%M:%S", "%m/%d/%Y %H:%M:%S")


def parse_scan_date(value) -> date:
    """Parse the scan-date spellings seen in scanner exports."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("scan date must be a non-empty string")

    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognized scan date: {value!r}")


def _count(*names: str):
    return Field(0, ge=0, validation_alias=AliasChoices(*names))


class _RawRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int | None = None
    scan_date: date = Field(validation_alias=AliasChoices("scanDate", "scan_date", "lastScan"))
    critical: int = _count("critical", "C")
    high: int = _count("high", "H")
    medium: int = _count("medium", "M")
    low: int = _count("low", "L")

    @field_validator("scan_date", mode="before")
    @classmethod
    def coerce_scan_date(cls, value):
        return parse_scan_date(value)

    def to_finding(self) -> FindingRecord:
        return FindingRecord(
            id=self.id,
            source=self.source,
            service_name=self.service_name,
            scan_date=self.scan_date,
            critical=self.critical,
            high=self.high,
            medium=self.medium,
            low=self.low,
        )


class MendRecord(_RawRecord):
    """Mend SCA/SAST/container export row; bulk exports key services by product."""

    source: Literal[SourceKey.MEND_SCA, SourceKey.MEND_SAST, SourceKey.MEND_CONTAINERS]
    service_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("serviceName", "service_name", "productName"),
    )


class EscapeRecord(_RawRecord):
    """Escape DAST row for a web application or API."""

    source: Literal[SourceKey.ESCAPE_WEBAPPS, SourceKey.ESCAPE_APIS]
    service_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("serviceName", "service_name", "applicationName"),
    )


class CrowdstrikeRecord(_RawRecord):
    """Crowdstrike image/container assessment row."""

    source: Literal[SourceKey.CROWDSTRIKE_IMAGES, SourceKey.CROWDSTRIKE_CONTAINERS]
    service_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("serviceName", "service_name", "imageName"),
    )


SourceRecord = Annotated[
    Union[MendRecord, EscapeRecord, CrowdstrikeRecord],
    Field(discriminator="source"),
]

_source_record_adapter: TypeAdapter[SourceRecord] = TypeAdapter(SourceRecord)


def normalize_record(source_key: SourceKey, raw: dict) -> FindingRecord:
    """Validate a raw scanner record for *source_key* and convert it to a FindingRecord.

    Raises:
        ValidationError: the payload is not a well-formed record for that source.
    """
    payload = {**raw, "source": SourceKey(source_key)}
    try:
        record = _source_record_adapter.validate_python(payload)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Malformed {SourceKey(source_key).value} finding record",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc
    return record.to_finding()
