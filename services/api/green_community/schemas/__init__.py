"""Pydantic schemas for API request/response validation."""

from green_community.schemas.common import Author, ErrorDetail, ErrorResponse, LikeResult, MessageResponse
from green_community.schemas.home import HomeStats
from green_community.schemas.profiles import (
    Achievement,
    LeaderboardEntry,
    ProfileOut,
    ProfileStats,
    ProfileUpdate,
)

__all__ = [
    "Author",
    "ErrorDetail",
    "ErrorResponse",
    "LikeResult",
    "MessageResponse",
    "HomeStats",
    "Achievement",
    "LeaderboardEntry",
    "ProfileOut",
    "ProfileStats",
    "ProfileUpdate",
]
