"""Schemas for media uploads."""

from pydantic import BaseModel


class MediaUploadOut(BaseModel):
    url: str
    media_type: str  # image, video
    bucket: str
    size_bytes: int
