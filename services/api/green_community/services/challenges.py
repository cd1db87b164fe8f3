"""Challenge service: listing, completion (points award) and leaderboard."""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from green_community.models import Challenge, ChallengeCompletion, Profile
from green_community.schemas import LeaderboardEntry
from green_community.schemas.challenges import ChallengeOut, CompletionResult
from green_community.services.errors import ConflictError, NotFoundError
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

LEADERBOARD_SIZE = 10


async def list_challenges(*, viewer_id: str | None = None) -> list[ChallengeOut]:
    """All challenges, highest points first."""
    async with get_session() as session:
        challenges = (
            (await session.execute(select(Challenge).order_by(Challenge.points.desc(), Challenge.title)))
            .scalars()
            .all()
        )
        completed = set(await _completed_ids(session, viewer_id)) if viewer_id else set()

    items = []
    for challenge in challenges:
        item = ChallengeOut.model_validate(challenge)
        item.completed = challenge.id in completed
        items.append(item)
    return items


async def _completed_ids(session, user_id: str) -> list[str]:
    result = await session.execute(
        select(ChallengeCompletion.challenge_id)
        .where(ChallengeCompletion.user_id == user_id)
        .order_by(ChallengeCompletion.completed_at.desc())
    )
    return list(result.scalars().all())


async def list_completed_ids(user_id: str) -> list[str]:
    """Ids of challenges the user has completed, most recent first."""
    async with get_session() as session:
        return await _completed_ids(session, user_id)


async def complete_challenge(
    *,
    challenge_id: str,
    user_id: str,
    proof_image_url: str | None = None,
    notes: str | None = None,
) -> CompletionResult:
    """Record a completion and credit the challenge's points, once per user.

    Raises:
        NotFoundError: Unknown challenge.
        ConflictError: The user already completed this challenge.
    """
    async with get_session() as session:
        challenge = await session.get(Challenge, challenge_id)
        if challenge is None:
            raise NotFoundError(
                "Challenge not found",
                code="CHALLENGE_NOT_FOUND",
                detail={"challenge_id": challenge_id},
            )

        existing = await session.execute(
            select(ChallengeCompletion.id).where(
                ChallengeCompletion.challenge_id == challenge_id,
                ChallengeCompletion.user_id == user_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("Challenge already completed", code="ALREADY_COMPLETED")

        session.add(
            ChallengeCompletion(
                challenge_id=challenge_id,
                user_id=user_id,
                proof_image_url=proof_image_url,
                notes=notes.strip() if notes else None,
                points_awarded=challenge.points,
            )
        )
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConflictError("Challenge already completed", code="ALREADY_COMPLETED") from e

        result = await session.execute(
            update(Profile)
            .where(Profile.user_id == user_id)
            .values(green_points=Profile.green_points + challenge.points)
            .returning(Profile.green_points)
        )
        green_points = result.scalar_one()

    logger.info(
        f"[challenges] completed challenge_id={challenge_id} user_id={user_id} "
        f"points=+{challenge.points} total={green_points}"
    )
    return CompletionResult(challenge_id=challenge_id, points_awarded=challenge.points, green_points=green_points)


async def get_leaderboard(limit: int = LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
    """Top profiles by green_points."""
    async with get_session() as session:
        profiles = (
            (
                await session.execute(
                    select(Profile).order_by(Profile.green_points.desc(), Profile.created_at.asc()).limit(limit)
                )
            )
            .scalars()
            .all()
        )

    return [
        LeaderboardEntry(
            rank=i,
            user_id=p.user_id,
            eco_name=p.eco_name,
            green_points=p.green_points or 0,
            avatar_url=p.avatar_url,
        )
        for i, p in enumerate(profiles, start=1)
    ]
