"""Common schemas used across the API."""

from typing import Any

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail


class Author(BaseModel):
    """Minimal profile embedded in stories, blogs and comments."""

    user_id: str
    eco_name: str
    avatar_url: str | None = None


class LikeResult(BaseModel):
    """Result of a like toggle."""

    liked: bool
    likes_count: int


class MessageResponse(BaseModel):
    message: str
