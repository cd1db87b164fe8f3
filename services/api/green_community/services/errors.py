"""Service-level errors rendered as { "error": { code, message, detail } }."""

from typing import Any


class ServiceError(RuntimeError):
    """Base error carrying a stable code and HTTP status."""

    status_code = 400
    default_code = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail = detail


class InvalidInputError(ServiceError):
    status_code = 400
    default_code = "INVALID_INPUT"


class AuthError(ServiceError):
    status_code = 401
    default_code = "NOT_AUTHENTICATED"


class ForbiddenError(ServiceError):
    status_code = 403
    default_code = "FORBIDDEN"


class NotFoundError(ServiceError):
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(ServiceError):
    status_code = 409
    default_code = "CONFLICT"
