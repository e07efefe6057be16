"""Normalized data models: canonical intermediates between scanners and the dashboard."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ScanEngine(str, Enum):
    MEND = "Mend"
    ESCAPE = "Escape"
    CROWDSTRIKE = "Crowdstrike"


class SourceKey(str, Enum):
    """One findings feed: a scan engine plus the asset category it scans."""

    MEND_SCA = "mend_sca"
    MEND_SAST = "mend_sast"
    MEND_CONTAINERS = "mend_containers"
    ESCAPE_WEBAPPS = "escape_webapps"
    ESCAPE_APIS = "escape_apis"
    CROWDSTRIKE_IMAGES = "crowdstrike_images"
    CROWDSTRIKE_CONTAINERS = "crowdstrike_containers"

    @property
    def engine(self) -> ScanEngine:
        return _ENGINE_BY_PREFIX[self.value.split("_", 1)[0]]

    @property
    def category(self) -> str:
        return self.value.split("_", 1)[1]

    @property
    def path(self) -> str:
        """Endpoint path relative to ``/api`` (e.g. ``mend/sca``)."""
        return f"{self.value.split('_', 1)[0]}/{self.category}"

    @classmethod
    def for_engine(cls, engine: ScanEngine) -> list["SourceKey"]:
        return [key for key in cls if key.engine == engine]

    @classmethod
    def from_path(cls, path: str) -> "SourceKey":
        return cls(path.strip("/").replace("/", "_"))


_ENGINE_BY_PREFIX: dict[str, ScanEngine] = {
    "mend": ScanEngine.MEND,
    "escape": ScanEngine.ESCAPE,
    "crowdstrike": ScanEngine.CROWDSTRIKE,
}


class FindingRecord(BaseModel):
    """Severity counts reported by one source for one service scan.

    This is the canonical intermediate format. Per-engine record types
    normalize INTO this model, and the aggregator only ever reads it.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int | None = None
    source: SourceKey
    service_name: str = Field(..., min_length=1)
    scan_date: date
    critical: int = Field(0, ge=0)
    high: int = Field(0, ge=0)
    medium: int = Field(0, ge=0)
    low: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low

    def to_api(self) -> dict:
        """Wire shape served by the findings endpoints."""
        return self.model_dump(mode="json", by_alias=True, exclude={"source"})
