"""Trace ID middleware: request correlation and access logging."""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from posture.logging_config import bind_request_context, clear_request_context

logger = logging.getLogger("posture.access")

TRACE_HEADER = "X-Trace-Id"


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Trace-Id or mint one, echo it back and log the request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or f"trc_{uuid.uuid4().hex[:16]}"
        request.state.trace_id = trace_id
        bind_request_context(trace_id, method=request.method, path=request.url.path)

        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "request_completed",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                },
            )
        finally:
            clear_request_context()
        response.headers[TRACE_HEADER] = trace_id
        return response
