"""Tests for startup seeding."""

import pytest

from posture.auth.passwords import verify_password
from posture.config import settings
from posture.integrations.normalized import SourceKey
from posture.repositories.application_repo import ApplicationRepository
from posture.repositories.finding_repo import ScanFindingRepository
from posture.repositories.user_repo import UserRepository
from posture.services.seed import DEMO_FINDINGS, DEMO_SERVICES, ensure_bootstrap_admin, seed_demo_data


@pytest.mark.asyncio
async def test_bootstrap_admin_created_once(db_session, monkeypatch):
    monkeypatch.setattr(settings, "bootstrap_admin_password", "bootstrap-pass")
    await ensure_bootstrap_admin(db_session)
    await ensure_bootstrap_admin(db_session)

    users = await UserRepository(db_session).list_all()
    assert len(users) == 1
    assert users[0].type == "Admin"
    assert verify_password(users[0].password_hash, "bootstrap-pass")


@pytest.mark.asyncio
async def test_bootstrap_admin_generates_password(db_session, monkeypatch):
    monkeypatch.setattr(settings, "bootstrap_admin_password", None)
    await ensure_bootstrap_admin(db_session)
    user = await UserRepository(db_session).get_by_username(settings.bootstrap_admin_username)
    assert user is not None
    assert user.password_hash.startswith("$argon2id$")


@pytest.mark.asyncio
async def test_seed_demo_data_only_into_empty_registry(db_session):
    assert await seed_demo_data(db_session) is True
    assert await seed_demo_data(db_session) is False

    services = await ApplicationRepository(db_session).list_all()
    assert sorted(s.name for s in services) == sorted(s["name"] for s in DEMO_SERVICES)

    rows = await ScanFindingRepository(db_session).list_by_source(SourceKey.MEND_SCA)
    assert len(rows) == len(DEMO_FINDINGS[SourceKey.MEND_SCA])
