"""API tests for findings feeds, ingestion and per-service standings."""

import pytest


async def _service(client, headers, name, risk_score="0.0"):
    response = await client.post(
        "/api/applications", json={"name": name, "riskScore": risk_score}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _ingest(client, headers, path, name, scan_date="2025-07-16", **counts):
    response = await client.post(
        f"/api/{path}",
        json={"serviceName": name, "scanDate": scan_date, **counts},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_ingest_and_list_source(client, admin_headers, user_headers):
    body = await _ingest(client, admin_headers, "mend/sca", "Auth", critical=1, high=2)
    assert body["serviceName"] == "Auth"
    assert body["scanDate"] == "2025-07-16"
    assert isinstance(body["id"], int)

    response = await client.get("/api/mend/sca", headers=user_headers)
    assert response.status_code == 200
    assert response.json() == [body]

    assert (await client.get("/api/mend/sast", headers=user_headers)).json() == []


@pytest.mark.asyncio
async def test_list_filters_by_service_name(client, admin_headers):
    await _ingest(client, admin_headers, "escape/apis", "Auth", low=1)
    await _ingest(client, admin_headers, "escape/apis", "Billing", low=2)
    response = await client.get("/api/escape/apis", params={"serviceName": "Billing"}, headers=admin_headers)
    assert [r["low"] for r in response.json()] == [2]


@pytest.mark.asyncio
async def test_ingest_same_scan_replaces_counts_and_refreshes_cache(client, admin_headers):
    await _ingest(client, admin_headers, "crowdstrike/images", "Auth", critical=1)
    assert len((await client.get("/api/crowdstrike/images", headers=admin_headers)).json()) == 1

    await _ingest(client, admin_headers, "crowdstrike/images", "Auth", critical=4)
    rows = (await client.get("/api/crowdstrike/images", headers=admin_headers)).json()
    assert [r["critical"] for r in rows] == [4]


@pytest.mark.asyncio
async def test_ingest_requires_admin(client, user_headers):
    response = await client.post(
        "/api/mend/sca", json={"serviceName": "Auth", "scanDate": "2025-07-16"}, headers=user_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_malformed_record_rejected(client, admin_headers):
    response = await client.post(
        "/api/mend/sca",
        json={"serviceName": "Auth", "scanDate": "2025-07-16", "high": -3},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_ingest_is_logged(client, admin_headers):
    await _ingest(client, admin_headers, "mend/containers", "Auth", medium=5)
    logs = (await client.get("/api/admin/activity-logs", headers=admin_headers)).json()
    assert logs[0]["action"] == "INGEST_FINDINGS"
    assert logs[0]["serviceName"] == "Auth"


@pytest.mark.asyncio
async def test_service_findings_across_sources(client, admin_headers):
    auth = await _service(client, admin_headers, "Auth")
    await _ingest(client, admin_headers, "mend/sca", "Auth", critical=1, high=2)
    await _ingest(client, admin_headers, "escape/webapps", "Auth", "2025-07-18", high=1, medium=3, low=1)
    await _ingest(client, admin_headers, "escape/webapps", "Other", critical=9)

    response = await client.get(f"/api/services/{auth['id']}/findings", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["sourcesSelected"] is True
    assert body["findings"] == {"total": 8, "C": 1, "H": 3, "M": 3, "L": 1, "lastScan": "2025-07-18"}
    assert body["bySource"]["mend_sca"]["total"] == 3
    assert body["bySource"]["crowdstrike_images"]["total"] == 0


@pytest.mark.asyncio
async def test_service_findings_source_selection(client, admin_headers):
    auth = await _service(client, admin_headers, "Auth")
    await _ingest(client, admin_headers, "mend/sca", "Auth", critical=1)
    await _ingest(client, admin_headers, "mend/sast", "Auth", critical=2)

    url = f"/api/services/{auth['id']}/findings"
    body = (await client.get(url, params={"sources": "mend_sast,mend/sca"}, headers=admin_headers)).json()
    assert body["sources"] == ["mend_sast", "mend_sca"]
    assert body["findings"]["C"] == 3

    body = (await client.get(url, params={"sources": ""}, headers=admin_headers)).json()
    assert body["sourcesSelected"] is False
    assert body["findings"]["total"] == 0

    response = await client.get(url, params={"sources": "nessus"}, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_standing_by_findings(client, admin_headers):
    services = {}
    for name, count in [("A", 10), ("B", 20), ("C", 30), ("D", 40)]:
        services[name] = await _service(client, admin_headers, name)
        await _ingest(client, admin_headers, "mend/sca", name, high=count)

    response = await client.get(f"/api/services/{services['A']['id']}/standing", headers=admin_headers)
    body = response.json()
    assert body["value"] == 10
    assert body["peerCount"] == 4
    assert body["percentile"] == 75
    assert body["tier"] == "Gold"

    response = await client.get("/api/services/standings", headers=admin_headers)
    ranked = response.json()
    assert [row["name"] for row in ranked] == ["A", "B", "C", "D"]
    assert [row["tier"] for row in ranked] == ["Gold", "Silver", "Bronze", "Bronze"]


@pytest.mark.asyncio
async def test_standing_by_risk(client, admin_headers):
    low = await _service(client, admin_headers, "Low Risk", "2.0")
    await _service(client, admin_headers, "High Risk", "9.0")

    response = await client.get(
        f"/api/services/{low['id']}/standing", params={"basis": "risk"}, headers=admin_headers
    )
    body = response.json()
    assert body["basis"] == "risk"
    assert body["percentile"] == 50
    assert body["tier"] == "Silver"


@pytest.mark.asyncio
async def test_sole_service_is_neutral(client, admin_headers):
    only = await _service(client, admin_headers, "Only")
    body = (await client.get(f"/api/services/{only['id']}/standing", headers=admin_headers)).json()
    assert body["percentile"] == 100
    assert body["tier"] == "Platinum"


@pytest.mark.asyncio
async def test_unknown_basis_rejected(client, admin_headers):
    only = await _service(client, admin_headers, "Only")
    response = await client.get(
        f"/api/services/{only['id']}/standing", params={"basis": "vibes"}, headers=admin_headers
    )
    assert response.status_code == 400
