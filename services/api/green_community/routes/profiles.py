"""Profile endpoints."""

from fastapi import APIRouter

from green_community.routes.deps import AuthUser
from green_community.schemas import ProfileOut, ProfileStats, ProfileUpdate
from green_community.services import profiles as profile_service

router = APIRouter()


@router.get("/me", response_model=ProfileOut)
async def get_my_profile(user: AuthUser) -> ProfileOut:
    return ProfileOut.model_validate(await profile_service.get_profile(user.user_id))


@router.patch("/me", response_model=ProfileOut)
async def update_my_profile(body: ProfileUpdate, user: AuthUser) -> ProfileOut:
    """Only fields present in the request body are changed."""
    changes = body.model_dump(exclude_unset=True)
    profile = await profile_service.update_profile(user.user_id, changes)
    return ProfileOut.model_validate(profile)


@router.get("/me/stats", response_model=ProfileStats)
async def get_my_stats(user: AuthUser) -> ProfileStats:
    """Activity counts and achievement badges."""
    return await profile_service.get_profile_stats(user.user_id)


@router.get("/{user_id}", response_model=ProfileOut)
async def get_public_profile(user_id: str) -> ProfileOut:
    return ProfileOut.model_validate(await profile_service.get_profile(user_id))
