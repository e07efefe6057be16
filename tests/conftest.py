"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from posture.config import settings
from posture.db.base import Base
from posture.db.engine import create_db_engine, create_session_factory
# Import all models to register with Base.metadata
import posture.db.models  # noqa: F401

ADMIN_PASSWORD = "admin-pass-123"
USER_PASSWORD = "user-pass-123"


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Cheap Argon2id parameters so each test hashes in milliseconds."""
    monkeypatch.setattr(settings, "argon2_time_cost", 1)
    monkeypatch.setattr(settings, "argon2_memory_cost", 1024)
    monkeypatch.setattr(settings, "argon2_parallelism", 1)
    monkeypatch.setattr(settings, "password_pepper", "test-pepper")


@pytest.fixture
async def db_engine(tmp_path):
    """File-backed SQLite engine so concurrent source fetches get their own connections."""
    engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'posture.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(db_engine, session_factory):
    """Create a test application instance with a fresh database."""
    from posture.api.middleware.rate_limit import limiter
    from posture.integrations.adapters.database import DatabaseFindingsSource
    from posture.integrations.cache import FindingsCache
    from posture.main import create_app

    limiter.reset()
    _app = create_app()
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    _app.state.findings_cache = FindingsCache(ttl_seconds=30)
    _app.state.findings_source = DatabaseFindingsSource(session_factory)
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _make_user(session_factory, username: str, password: str, user_type: str, status: str = "Active"):
    from posture.auth.passwords import hash_password
    from posture.repositories.user_repo import UserRepository

    async with session_factory() as session:
        row = await UserRepository(session).create(
            name=username.title(),
            username=username,
            type=user_type,
            status=status,
            password_hash=hash_password(password),
        )
        await session.commit()
        return row


@pytest.fixture
async def admin_user(session_factory):
    return await _make_user(session_factory, "admin", ADMIN_PASSWORD, "Admin")


@pytest.fixture
async def regular_user(session_factory):
    return await _make_user(session_factory, "viewer", USER_PASSWORD, "User")


@pytest.fixture
async def disabled_user(session_factory):
    return await _make_user(session_factory, "former", USER_PASSWORD, "User", status="Disabled")


@pytest.fixture
def admin_headers(admin_user) -> dict:
    from posture.auth.tokens import create_access_token

    token = create_access_token(admin_user.id, admin_user.username, admin_user.type)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(regular_user) -> dict:
    from posture.auth.tokens import create_access_token

    token = create_access_token(regular_user.id, regular_user.username, regular_user.type)
    return {"Authorization": f"Bearer {token}"}
