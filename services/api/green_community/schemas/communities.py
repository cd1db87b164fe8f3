"""Schemas for communities and memberships."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from green_community.models.community import CommunityCategory


class CommunityOut(BaseModel):
    id: str
    name: str
    description: str
    category: CommunityCategory
    icon_url: str | None = None
    cover_image_url: str | None = None
    member_count: int = 0
    created_by: str | None = None
    created_at: datetime | None = None
    is_member: bool = False

    model_config = {"from_attributes": True}


class CommunityList(BaseModel):
    communities: list[CommunityOut]
    total_communities: int = Field(ge=0)
    total_members: int = Field(ge=0)


class CommunityCreate(BaseModel):
    name: str = Field(max_length=200)
    description: str
    category: CommunityCategory

    @field_validator("name", "description")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class CategoryOption(BaseModel):
    value: str
    label: str


class MembershipResult(BaseModel):
    community_id: str
    is_member: bool
    member_count: int
