"""Custom exception classes for the posture API."""


class PostureError(Exception):
    """Base exception for posture."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(PostureError):
    """Schema or request validation failure."""

    def __init__(self, message: str, details=None):
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class NotFoundError(PostureError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str | int):
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class AuthenticationError(PostureError):
    """Authentication required or credentials invalid."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class AuthorizationError(PostureError):
    """Insufficient permissions."""

    def __init__(self, message: str = "Insufficient permissions", details=None):
        super().__init__("AUTHORIZATION_ERROR", message, details, status_code=403)


class ConflictError(PostureError):
    """Resource state conflict."""

    def __init__(self, message: str):
        super().__init__("CONFLICT", message, status_code=409)
