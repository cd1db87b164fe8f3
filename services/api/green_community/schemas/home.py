"""Schemas for the landing page endpoint (/v1/home)."""

from pydantic import BaseModel, Field


class HomeStats(BaseModel):
    """Exact row counts shown on the landing page."""

    communities: int = Field(ge=0)
    stories: int = Field(ge=0)
    blogs: int = Field(ge=0)
    challenges: int = Field(ge=0)
