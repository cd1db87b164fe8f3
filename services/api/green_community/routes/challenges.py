"""Challenge endpoints."""

from fastapi import APIRouter, Query

from green_community.routes.deps import AuthUser, OptionalUser
from green_community.schemas import LeaderboardEntry
from green_community.schemas.challenges import ChallengeOut, CompletionCreate, CompletionResult
from green_community.services import challenges as challenge_service

router = APIRouter()


@router.get("", response_model=list[ChallengeOut])
async def list_challenges(user: OptionalUser) -> list[ChallengeOut]:
    return await challenge_service.list_challenges(viewer_id=user.user_id if user else None)


@router.get("/completions", response_model=list[str])
async def list_completions(user: AuthUser) -> list[str]:
    """Ids of challenges completed by the caller."""
    return await challenge_service.list_completed_ids(user.user_id)


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(
    limit: int = Query(default=challenge_service.LEADERBOARD_SIZE, ge=1, le=50),
) -> list[LeaderboardEntry]:
    return await challenge_service.get_leaderboard(limit=limit)


@router.post("/{challenge_id}/complete", response_model=CompletionResult)
async def complete_challenge(
    challenge_id: str,
    user: AuthUser,
    body: CompletionCreate | None = None,
) -> CompletionResult:
    """Record a completion and award points (once per user)."""
    body = body or CompletionCreate()
    return await challenge_service.complete_challenge(
        challenge_id=challenge_id,
        user_id=user.user_id,
        proof_image_url=body.proof_image_url,
        notes=body.notes,
    )
