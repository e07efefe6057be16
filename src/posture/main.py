"""FastAPI application factory and lifespan management."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from posture.config import settings
from posture.db.engine import create_db_engine, create_session_factory
from posture.integrations.cache import FindingsCache
from posture.integrations.service import build_findings_source
from posture.logging_config import configure_logging

# Configure logging at import time
_json_logs = os.environ.get("POSTURE_LOCAL", "0") != "1"
configure_logging(log_level=settings.log_level, json_output=_json_logs)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)
    session_factory = create_session_factory(engine)

    # No migrations; the schema is created from the ORM models.
    if settings.auto_create_tables:
        from posture.db.base import Base
        import posture.db.models  # noqa: F401 (register all ORM models)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    from posture.services.seed import ensure_bootstrap_admin, seed_demo_data

    async with session_factory() as seed_session:
        await ensure_bootstrap_admin(seed_session)
        if settings.seed_demo_data:
            await seed_demo_data(seed_session)

    app.state.db_engine = engine
    app.state.db_session_factory = session_factory
    app.state.findings_cache = FindingsCache(ttl_seconds=settings.findings_cache_ttl_seconds)
    app.state.findings_source = build_findings_source(settings, session_factory)

    logger.info(
        "Posture API started (db=%s, findings=%s)",
        "sqlite" if "sqlite" in db_url else "postgresql",
        settings.findings_backend,
    )
    yield

    await engine.dispose()
    logger.info("Posture API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Posture API",
        version="1.0.0",
        description="Security posture dashboard: scanner findings, risk scoring and service standings.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add middleware (order matters: last added = first executed)
    from posture.api.middleware.auth import AuthMiddleware
    from posture.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(AuthMiddleware)
    app.add_middleware(TraceIdMiddleware)

    from posture.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from posture.api.middleware.rate_limit import setup_rate_limiter
    setup_rate_limiter(app)

    # Prometheus metrics (internal endpoint)
    Instrumentator(
        should_group_status_codes=True,
        should_respect_env_var=False,
        excluded_handlers=["/api/health.*", "/metrics"],
    ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    from posture.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
