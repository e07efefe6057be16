"""FastAPI exception handlers producing the ErrorResponse envelope."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from posture.errors.exceptions import AuthorizationError, PostureError
from posture.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def _error_response(request: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    error_response = ErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            details=details,
            trace_id=getattr(request.state, "trace_id", "unknown"),
            timestamp=datetime.now(timezone.utc),
        ),
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(PostureError)
    async def posture_error_handler(request: Request, exc: PostureError):
        trace_id = getattr(request.state, "trace_id", "unknown")
        if isinstance(exc, AuthorizationError):
            user = getattr(request.state, "user", {}) or {}
            logger.warning(
                "access_denied",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "trace_id": trace_id,
                    "user_sub": user.get("sub", "anonymous"),
                    "user_roles": user.get("roles", []),
                    "reason": str(exc),
                },
            )
        return _error_response(request, exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        return _error_response(request, 400, "VALIDATION_ERROR", "Request validation failed", details)
