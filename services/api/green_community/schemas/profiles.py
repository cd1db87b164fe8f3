"""Schemas for profiles, stats and the points leaderboard."""

from datetime import datetime

from pydantic import BaseModel, Field


class ProfileOut(BaseModel):
    id: str
    user_id: str
    eco_name: str
    full_name: str | None = None
    bio: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    green_points: int = 0
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    eco_name: str | None = Field(default=None, min_length=1, max_length=100)
    full_name: str | None = Field(default=None, max_length=200)
    bio: str | None = None
    location: str | None = Field(default=None, max_length=200)
    avatar_url: str | None = None


class Achievement(BaseModel):
    name: str
    description: str
    earned: bool


class ProfileStats(BaseModel):
    stories: int = Field(ge=0)
    blogs: int = Field(ge=0)
    communities: int = Field(ge=0)
    challenges: int = Field(ge=0)
    green_points: int
    achievements: list[Achievement] = Field(default_factory=list)


class LeaderboardEntry(BaseModel):
    rank: int = Field(ge=1)
    user_id: str
    eco_name: str
    green_points: int
    avatar_url: str | None = None
