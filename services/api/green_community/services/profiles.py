"""Profile service: read/update profiles, activity stats and achievements."""

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import func, select

from green_community.models import Blog, ChallengeCompletion, CommunityMembership, Profile, Story
from green_community.schemas import Achievement, ProfileStats
from green_community.services.errors import NotFoundError
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

# Fields a user may change on their own profile
_EDITABLE_FIELDS = ("eco_name", "full_name", "bio", "location", "avatar_url")

ADVOCATE_MIN_DAYS = 30


async def get_profile(user_id: str) -> Profile:
    """Get a profile by owning user id.

    Raises:
        NotFoundError: If the user has no profile.
    """
    async with get_session() as session:
        result = await session.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND", detail={"user_id": user_id})
        return profile


async def update_profile(user_id: str, changes: dict[str, Any]) -> Profile:
    """Apply a partial update to the caller's profile.

    Unknown keys are ignored; eco_name is stripped and must stay non-empty.
    """
    async with get_session() as session:
        result = await session.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND", detail={"user_id": user_id})

        for field in _EDITABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if isinstance(value, str):
                value = value.strip()
            if field == "eco_name" and not value:
                continue
            setattr(profile, field, value)

        await session.flush()
        await session.refresh(profile)

    logger.info(f"[profiles] updated user_id={user_id} fields={sorted(changes)}")
    return profile


def compute_achievements(
    *,
    stories: int,
    blogs: int,
    communities: int,
    challenges: int,
    green_points: int,
    member_since: datetime | None,
    now: datetime | None = None,
) -> list[Achievement]:
    """Evaluate achievement badges from activity counts."""
    now = now or datetime.now(timezone.utc)
    days_active = (now - member_since).days if member_since else 0

    return [
        Achievement(name="Eco Warrior", description="Completed 5+ challenges", earned=challenges >= 5),
        Achievement(name="Storyteller", description="Shared 3+ eco stories", earned=stories >= 3),
        Achievement(name="Community Leader", description="Joined 2+ communities", earned=communities >= 2),
        Achievement(name="Green Blogger", description="Published 2+ blogs", earned=blogs >= 2),
        Achievement(name="Point Collector", description="Earned 500+ green points", earned=green_points >= 500),
        Achievement(
            name="Sustainability Advocate",
            description=f"Active for {ADVOCATE_MIN_DAYS}+ days",
            earned=days_active >= ADVOCATE_MIN_DAYS,
        ),
    ]


async def get_profile_stats(user_id: str) -> ProfileStats:
    """Count the user's stories, blogs, memberships and completed challenges."""
    async with get_session() as session:
        result = await session.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND", detail={"user_id": user_id})

        stories = await session.scalar(select(func.count(Story.id)).where(Story.user_id == user_id))
        blogs = await session.scalar(select(func.count(Blog.id)).where(Blog.user_id == user_id))
        communities = await session.scalar(
            select(func.count(CommunityMembership.id)).where(CommunityMembership.user_id == user_id)
        )
        challenges = await session.scalar(
            select(func.count(ChallengeCompletion.id)).where(ChallengeCompletion.user_id == user_id)
        )

    counts = {
        "stories": stories or 0,
        "blogs": blogs or 0,
        "communities": communities or 0,
        "challenges": challenges or 0,
    }
    return ProfileStats(
        **counts,
        green_points=profile.green_points or 0,
        achievements=compute_achievements(
            **counts,
            green_points=profile.green_points or 0,
            member_since=profile.created_at,
        ),
    )
