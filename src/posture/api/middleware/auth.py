"""JWT Bearer authentication middleware."""

import logging

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from posture.auth.tokens import decode_token

logger = logging.getLogger(__name__)

# Paths that do not require authentication
_PUBLIC_PATHS = {
    "/api/health",
    "/api/health/live",
    "/api/health/ready",
    "/api/login",
    "/api/logout",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/metrics",
}

_ANONYMOUS = {"sub": "anonymous", "roles": []}


class AuthMiddleware(BaseHTTPMiddleware):
    """Validate the Bearer token, if any, and attach user info to request.state.

    Routes enforce authentication themselves through ``get_current_user``.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path

        if path in _PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc"):
            request.state.user = dict(_ANONYMOUS)
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if auth_header.startswith("Bearer "):
            user_info = self._validate_jwt(auth_header[7:])
        else:
            user_info = dict(_ANONYMOUS)

        request.state.user = user_info
        if user_info.get("sub") not in ("anonymous", ""):
            structlog.contextvars.bind_contextvars(user_id=user_info["sub"])
        return await call_next(request)

    def _validate_jwt(self, token: str) -> dict:
        try:
            payload = decode_token(token)
        except ValueError:
            return {**_ANONYMOUS, "_auth_error": "invalid_token"}

        if payload.get("type") != "access":
            return {**_ANONYMOUS, "_auth_error": "not_access_token"}

        return {
            "sub": payload.get("sub", ""),
            "username": payload.get("username", ""),
            "roles": payload.get("roles", []),
        }
