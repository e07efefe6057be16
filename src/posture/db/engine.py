"""Async SQLAlchemy engine and session creation."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from posture.config import settings


def create_db_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine for PostgreSQL (asyncpg) or local SQLite (aiosqlite).

    Pool sizing only applies off SQLite.
    """
    db_url = url or settings.effective_database_url
    if db_url.startswith("sqlite"):
        return create_async_engine(db_url, echo=False)
    return create_async_engine(db_url, echo=False, pool_size=10, max_overflow=20, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
