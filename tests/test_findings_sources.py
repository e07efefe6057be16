"""Tests for findings sources, the TTL cache and the concurrent collector."""

import json
from datetime import date

import httpx
import pytest

from posture.config import Settings
from posture.integrations.adapters import AVAILABLE_SOURCES, import_source
from posture.integrations.adapters.base import FindingsSource
from posture.integrations.adapters.database import DatabaseFindingsSource
from posture.integrations.adapters.remote import RemoteFindingsSource
from posture.integrations.cache import FindingsCache
from posture.integrations.normalized import FindingRecord, SourceKey
from posture.integrations.service import FindingsCollector, build_findings_source
from posture.repositories.finding_repo import ScanFindingRepository


def _record(source, name="Auth", critical=1):
    return FindingRecord(source=source, service_name=name, scan_date=date(2025, 7, 16), critical=critical)


class StubSource(FindingsSource):
    source_type = "stub"

    def __init__(self, data=None, failing=()):
        self.data = data or {}
        self.failing = set(failing)
        self.calls: list[SourceKey] = []

    async def fetch(self, source_key):
        self.calls.append(source_key)
        if source_key in self.failing:
            raise RuntimeError("scanner unavailable")
        return self.data.get(source_key, [])


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class TestFindingsCache:
    def test_entries_expire(self):
        clock = FakeClock()
        cache = FindingsCache(ttl_seconds=30, clock=clock)
        cache.put(SourceKey.MEND_SCA, [_record(SourceKey.MEND_SCA)])
        assert len(cache.get(SourceKey.MEND_SCA)) == 1
        clock.now += 30
        assert cache.get(SourceKey.MEND_SCA) is None

    def test_invalidate_one_source(self):
        cache = FindingsCache(ttl_seconds=30)
        cache.put(SourceKey.MEND_SCA, [])
        cache.put(SourceKey.ESCAPE_APIS, [])
        cache.invalidate(SourceKey.MEND_SCA)
        assert cache.get(SourceKey.MEND_SCA) is None
        assert cache.get(SourceKey.ESCAPE_APIS) == []

    def test_invalidate_all(self):
        cache = FindingsCache(ttl_seconds=30)
        cache.put(SourceKey.MEND_SCA, [])
        cache.invalidate()
        assert len(cache) == 0

    def test_zero_ttl_disables_caching(self):
        cache = FindingsCache(ttl_seconds=0)
        cache.put(SourceKey.MEND_SCA, [])
        assert cache.get(SourceKey.MEND_SCA) is None


# ---------------------------------------------------------------------------
# Collector
# ---------------------------------------------------------------------------


class TestFindingsCollector:
    @pytest.mark.asyncio
    async def test_collects_every_source_by_default(self):
        source = StubSource({SourceKey.MEND_SCA: [_record(SourceKey.MEND_SCA)]})
        result = await FindingsCollector(source).collect()
        assert list(result) == list(SourceKey)
        assert len(result[SourceKey.MEND_SCA]) == 1
        assert result[SourceKey.ESCAPE_APIS] == []

    @pytest.mark.asyncio
    async def test_failing_source_contributes_nothing(self):
        source = StubSource(
            {SourceKey.MEND_SCA: [_record(SourceKey.MEND_SCA)]},
            failing={SourceKey.ESCAPE_WEBAPPS},
        )
        result = await FindingsCollector(source).collect([SourceKey.MEND_SCA, SourceKey.ESCAPE_WEBAPPS])
        assert result[SourceKey.ESCAPE_WEBAPPS] == []
        assert len(result[SourceKey.MEND_SCA]) == 1

    @pytest.mark.asyncio
    async def test_empty_selection(self):
        assert await FindingsCollector(StubSource()).collect([]) == {}

    @pytest.mark.asyncio
    async def test_cache_avoids_refetch(self):
        source = StubSource({SourceKey.MEND_SCA: [_record(SourceKey.MEND_SCA)]})
        collector = FindingsCollector(source, cache=FindingsCache(ttl_seconds=60))
        await collector.collect_one(SourceKey.MEND_SCA)
        await collector.collect_one(SourceKey.MEND_SCA)
        assert source.calls == [SourceKey.MEND_SCA]

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self):
        source = StubSource(failing={SourceKey.MEND_SCA})
        collector = FindingsCollector(source, cache=FindingsCache(ttl_seconds=60))
        await collector.collect_one(SourceKey.MEND_SCA)
        await collector.collect_one(SourceKey.MEND_SCA)
        assert len(source.calls) == 2


# ---------------------------------------------------------------------------
# Database source
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_database_source_reads_one_source(session_factory):
    async with session_factory() as session:
        repo = ScanFindingRepository(session)
        await repo.upsert(_record(SourceKey.MEND_SCA, "Auth", critical=2))
        await repo.upsert(_record(SourceKey.MEND_SAST, "Auth", critical=5))
        await session.commit()

    source = DatabaseFindingsSource(session_factory)
    result = await FindingsCollector(source).collect([SourceKey.MEND_SCA, SourceKey.MEND_SAST])
    assert [r.critical for r in result[SourceKey.MEND_SCA]] == [2]
    assert [r.critical for r in result[SourceKey.MEND_SAST]] == [5]
    assert result[SourceKey.MEND_SCA][0].id is not None


@pytest.mark.asyncio
async def test_upsert_replaces_same_scan(session_factory):
    async with session_factory() as session:
        repo = ScanFindingRepository(session)
        await repo.upsert(_record(SourceKey.MEND_SCA, "Auth", critical=2))
        await repo.upsert(_record(SourceKey.MEND_SCA, "Auth", critical=7))
        await session.commit()
        rows = await repo.list_by_source(SourceKey.MEND_SCA)
    assert [row.critical for row in rows] == [7]


# ---------------------------------------------------------------------------
# Remote source
# ---------------------------------------------------------------------------


def _transport(handler):
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_remote_source_normalizes_records(monkeypatch):
    monkeypatch.setenv("POSTURE_TEST_TOKEN", "s3cret")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        body = [
            {"id": 1, "serviceName": "Auth", "scanDate": "07/16/2025", "critical": 3},
            {"id": 2, "serviceName": "Auth", "scanDate": "2025-07-17", "critical": -4},
            "not-a-record",
        ]
        return httpx.Response(200, content=json.dumps(body))

    source = RemoteFindingsSource(
        "https://posture.example/",
        token_env="POSTURE_TEST_TOKEN",
        transport=_transport(handler),
    )
    records = await source.fetch(SourceKey.ESCAPE_WEBAPPS)

    assert seen["url"] == "https://posture.example/api/escape/webapps"
    assert seen["auth"] == "Bearer s3cret"
    assert len(records) == 1
    assert records[0].source is SourceKey.ESCAPE_WEBAPPS
    assert records[0].scan_date == date(2025, 7, 16)


@pytest.mark.asyncio
async def test_remote_source_accepts_results_envelope():
    def handler(request):
        return httpx.Response(200, json={"results": [{"imageName": "api:2", "scanDate": "2025-07-16", "H": 4}]})

    source = RemoteFindingsSource("https://posture.example", transport=_transport(handler))
    records = await source.fetch(SourceKey.CROWDSTRIKE_IMAGES)
    assert records[0].service_name == "api:2"
    assert records[0].high == 4


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="down"),
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json={"results": "nope"}),
    ],
)
async def test_remote_source_fails_open(response):
    source = RemoteFindingsSource("https://posture.example", transport=_transport(lambda request: response))
    assert await source.fetch(SourceKey.MEND_SCA) == []


@pytest.mark.asyncio
async def test_remote_source_transport_error_fails_open():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    source = RemoteFindingsSource("https://posture.example", transport=_transport(handler))
    assert await source.fetch(SourceKey.MEND_SCA) == []


# ---------------------------------------------------------------------------
# Backend selection
# ---------------------------------------------------------------------------


def test_source_registry_imports():
    for dotted in AVAILABLE_SOURCES.values():
        assert issubclass(import_source(dotted), FindingsSource)


def test_build_remote_source_requires_url():
    with pytest.raises(ValueError):
        build_findings_source(Settings(findings_backend="remote", remote_findings_url=None), None)


def test_build_sources():
    remote = build_findings_source(
        Settings(findings_backend="remote", remote_findings_url="https://posture.example"), None
    )
    assert isinstance(remote, RemoteFindingsSource)
    assert isinstance(build_findings_source(Settings(findings_backend="database"), object()), DatabaseFindingsSource)
    with pytest.raises(ValueError):
        build_findings_source(Settings(findings_backend="ftp"), None)
