"""API tests for login, password changes and the profile endpoints."""

import pytest
from argon2 import PasswordHasher
from sqlalchemy import select

from posture.db.models.user import UserRow

ADMIN_PASSWORD = "admin-pass-123"
USER_PASSWORD = "user-pass-123"


@pytest.mark.asyncio
async def test_login_returns_token(client, admin_user):
    response = await client.post("/api/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] > 0
    assert body["user"]["username"] == "admin"
    assert "password" not in str(body["user"]).lower()

    headers = {"Authorization": f"Bearer {body['access_token']}"}
    me = await client.get("/api/auth/user", headers=headers)
    assert me.status_code == 200
    assert me.json()["type"] == "Admin"


@pytest.mark.asyncio
async def test_login_rejects_bad_password(client, admin_user):
    response = await client.post("/api/login", json={"username": "admin", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_unknown_user_gets_same_error(client):
    response = await client.post("/api/login", json={"username": "ghost", "password": "whatever"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_disabled_account_cannot_login(client, disabled_user):
    response = await client.post("/api/login", json={"username": "former", "password": USER_PASSWORD})
    assert response.status_code == 403
    assert response.json()["error"]["details"] == {"accountDisabled": True}


@pytest.mark.asyncio
async def test_login_is_rate_limited(client, admin_user):
    for _ in range(5):
        response = await client.post("/api/login", json={"username": "admin", "password": "wrong"})
        assert response.status_code == 401
    response = await client.post("/api/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 429
    assert response.json()["error"]["code"] == "RATE_LIMITED"


@pytest.mark.asyncio
async def test_login_upgrades_weak_hash(client, admin_user, session_factory, monkeypatch):
    from posture.config import settings

    weak = PasswordHasher(time_cost=1, memory_cost=512, parallelism=1)
    async with session_factory() as session:
        row = await session.get(UserRow, admin_user.id)
        row.password_hash = weak.hash(ADMIN_PASSWORD + settings.password_pepper)
        await session.commit()

    response = await client.post("/api/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200

    async with session_factory() as session:
        stored = (await session.execute(select(UserRow).where(UserRow.id == admin_user.id))).scalar_one()
    assert "m=1024" in stored.password_hash
    assert stored.password_updated_at is not None
    assert stored.last_login is not None


@pytest.mark.asyncio
async def test_protected_route_requires_token(client):
    response = await client.get("/api/auth/user")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_rejected(client):
    response = await client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout(client):
    response = await client.post("/api/logout")
    assert response.status_code == 200
    assert response.json()["success"] is True


@pytest.mark.asyncio
async def test_change_password(client, regular_user, user_headers):
    response = await client.post(
        "/api/auth/change-password",
        json={"currentPassword": USER_PASSWORD, "newPassword": "brand-new-pass"},
        headers=user_headers,
    )
    assert response.status_code == 200

    old = await client.post("/api/login", json={"username": "viewer", "password": USER_PASSWORD})
    assert old.status_code == 401
    new = await client.post("/api/login", json={"username": "viewer", "password": "brand-new-pass"})
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_change_password_checks_current(client, user_headers):
    response = await client.post(
        "/api/auth/change-password",
        json={"currentPassword": "wrong-one", "newPassword": "brand-new-pass"},
        headers=user_headers,
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_change_password_enforces_length(client, user_headers):
    response = await client.post(
        "/api/auth/change-password",
        json={"currentPassword": USER_PASSWORD, "newPassword": "short"},
        headers=user_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_profile_read_and_update(client, user_headers):
    response = await client.get("/api/profile", headers=user_headers)
    assert response.json()["username"] == "viewer"

    response = await client.patch(
        "/api/profile", json={"name": "Vera Viewer", "username": "vera"}, headers=user_headers
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Vera Viewer"
    assert response.json()["username"] == "vera"


@pytest.mark.asyncio
async def test_profile_username_conflict(client, admin_user, user_headers):
    response = await client.patch(
        "/api/profile", json={"name": "Viewer", "username": "admin"}, headers=user_headers
    )
    assert response.status_code == 409
