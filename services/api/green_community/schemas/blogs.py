"""Schemas for blogs."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from green_community.schemas.common import Author


class BlogOut(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    excerpt: str | None = None
    cover_image_url: str | None = None
    tags: list[str] | None = None
    published: bool = False
    published_at: datetime | None = None
    read_time: int | None = None
    likes_count: int = 0
    comments_count: int = 0
    created_at: datetime | None = None
    author: Author | None = None
    liked: bool = False


class BlogCreate(BaseModel):
    title: str = Field(max_length=300)
    content: str
    excerpt: str | None = None
    tags: list[str] | None = None
    cover_image_url: str | None = None
    published: bool = True

    @field_validator("title", "content")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("must not be blank")
        return value
