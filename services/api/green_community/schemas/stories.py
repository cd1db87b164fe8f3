"""Schemas for stories and story comments."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from green_community.schemas.common import Author


class StoryOut(BaseModel):
    id: str
    user_id: str
    community_id: str | None = None
    community_name: str | None = None
    content: str
    media_url: str | None = None
    media_type: str | None = None
    likes_count: int = 0
    comments_count: int = 0
    created_at: datetime | None = None
    author: Author | None = None
    liked: bool = False


class StoryCreate(BaseModel):
    content: str = Field(max_length=5000)
    media_url: str | None = None
    media_type: Literal["image", "video"] | None = None
    community_id: str | None = None

    @field_validator("content")
    @classmethod
    def _strip_content(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("content must not be blank")
        return value


class CommentCreate(BaseModel):
    content: str = Field(max_length=2000)

    @field_validator("content")
    @classmethod
    def _strip_content(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("content must not be blank")
        return value


class CommentOut(BaseModel):
    id: str
    user_id: str
    content: str
    created_at: datetime | None = None
    author: Author | None = None


class SharePayload(BaseModel):
    title: str
    text: str
    url: str
