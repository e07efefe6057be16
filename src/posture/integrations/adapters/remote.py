"""Findings source that pulls from another dashboard deployment over HTTP."""

from __future__ import annotations

import logging
import os

import httpx

from posture.errors.exceptions import ValidationError
from posture.integrations.adapters.base import FindingsSource
from posture.integrations.normalized import FindingRecord, SourceKey
from posture.integrations.records import normalize_record

logger = logging.getLogger(__name__)


class RemoteFindingsSource(FindingsSource):
    """GETs ``{base_url}/api/{engine}/{category}`` and normalizes each record.

    Expected configuration:
        base_url:   e.g. ``https://posture.internal.example``
        token_env:  name of the environment variable holding a bearer token.

    Transport errors, error statuses and non-JSON bodies all yield an empty
    list; malformed individual records are skipped.
    """

    source_type: str = "remote"

    def __init__(
        self,
        base_url: str,
        token_env: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_env = token_env
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = os.environ.get(self.token_env) if self.token_env else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def fetch(self, source_key: SourceKey) -> list[FindingRecord]:
        source_key = SourceKey(source_key)
        url = f"{self.base_url}/api/{source_key.path}"

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                resp = await client.get(url, headers=self._headers())
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Remote findings source returned HTTP %s for %s: %s",
                exc.response.status_code,
                source_key.value,
                exc,
            )
            return []
        except httpx.HTTPError as exc:
            logger.error("HTTP error pulling %s findings: %s", source_key.value, exc)
            return []

        try:
            payload = resp.json()
        except ValueError:
            logger.error("Non-JSON response for %s findings", source_key.value)
            return []

        raw_records = payload.get("results", []) if isinstance(payload, dict) else payload
        if not isinstance(raw_records, list):
            logger.error("Unexpected payload shape for %s findings", source_key.value)
            return []

        records: list[FindingRecord] = []
        for raw in raw_records:
            if not isinstance(raw, dict):
                logger.warning("Skipping non-object %s record", source_key.value)
                continue
            try:
                records.append(normalize_record(source_key, raw))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed %s record %s: %s",
                    source_key.value,
                    raw.get("id", "<unknown>"),
                    exc.message,
                )

        logger.info("Pulled %d %s findings from %s", len(records), source_key.value, self.base_url)
        return records
