"""Rate limiting using slowapi."""

import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from posture.config import settings
from posture.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Use user id for authenticated users, client IP for anonymous ones."""
    user = getattr(request.state, "user", {}) or {}
    sub = user.get("sub", "")
    if sub and sub != "anonymous":
        return f"user:{sub}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[],
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    trace_id = getattr(request.state, "trace_id", "unknown")
    logger.warning("rate_limited", extra={"path": request.url.path, "limit": str(exc.detail)})
    body = ErrorResponse(
        error=ErrorDetail(
            code="RATE_LIMITED",
            message="Too many requests, please try again later.",
            details=str(exc.detail),
            trace_id=trace_id,
            timestamp=datetime.now(timezone.utc),
        )
    )
    return JSONResponse(status_code=429, content=body.model_dump(mode="json", exclude_none=True))


def setup_rate_limiter(app) -> None:
    """Attach the slowapi limiter to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    if settings.rate_limit_enabled:
        logger.info("Rate limiter configured (login=%s)", settings.rate_limit_login)
