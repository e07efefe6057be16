"""Health check endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from posture.logging_config import SERVICE_NAME

API_VERSION = "1.0.0"

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": SERVICE_NAME, "version": API_VERSION}


@router.get("/health/live")
async def liveness():
    """Liveness probe; 200 whenever the process can serve requests."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness(request: Request):
    """Readiness probe.

    Only the database gates readiness. Findings sources fail open per
    request, so the configured source is reported but never probed.
    """
    state = request.app.state
    checks: dict[str, str | int] = {}
    ready = True

    try:
        async with state.db_session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:
        checks["database"] = f"error: {exc}"
        ready = False

    source = getattr(state, "findings_source", None)
    checks["findings_source"] = source.source_type if source is not None else "unconfigured"
    cache = getattr(state, "findings_cache", None)
    checks["findings_cache_entries"] = len(cache) if cache is not None else 0

    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "not_ready", "checks": checks},
    )
