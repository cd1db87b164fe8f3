"""Story service: feed, posting, like toggles, comments and share payloads."""

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from green_community.models import Community, Profile, Story, StoryComment, StoryLike
from green_community.schemas import Author, LikeResult
from green_community.schemas.stories import CommentOut, SharePayload, StoryOut
from green_community.services.errors import ConflictError, NotFoundError
from green_community.settings import get_settings
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

SHARE_TEXT_LIMIT = 100


def share_text(content: str, limit: int = SHARE_TEXT_LIMIT) -> str:
    """Truncate story content for sharing, appending "..." when cut."""
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


def _author(profile: Profile | None, user_id: str) -> Author:
    if profile is None:
        return Author(user_id=user_id, eco_name="Unknown")
    return Author(user_id=user_id, eco_name=profile.eco_name, avatar_url=profile.avatar_url)


def _story_out(story: Story, profile: Profile | None, community_name: str | None, liked: bool) -> StoryOut:
    return StoryOut(
        id=story.id,
        user_id=story.user_id,
        community_id=story.community_id,
        community_name=community_name,
        content=story.content,
        media_url=story.media_url,
        media_type=story.media_type,
        likes_count=story.likes_count or 0,
        comments_count=story.comments_count or 0,
        created_at=story.created_at,
        author=_author(profile, story.user_id),
        liked=liked,
    )


async def list_stories(
    *,
    community_id: str | None = None,
    viewer_id: str | None = None,
    limit: int = 50,
) -> list[StoryOut]:
    """Stories newest first with author and `liked` flag for the viewer."""
    async with get_session() as session:
        query = (
            select(Story, Profile, Community.name)
            .outerjoin(Profile, Profile.user_id == Story.user_id)
            .outerjoin(Community, Community.id == Story.community_id)
            .order_by(Story.created_at.desc())
            .limit(limit)
        )
        if community_id:
            query = query.where(Story.community_id == community_id)
        rows = (await session.execute(query)).all()

        liked_ids: set[str] = set()
        if viewer_id and rows:
            result = await session.execute(
                select(StoryLike.story_id).where(
                    StoryLike.user_id == viewer_id,
                    StoryLike.story_id.in_([row[0].id for row in rows]),
                )
            )
            liked_ids = set(result.scalars().all())

    return [
        _story_out(story, profile, community_name, story.id in liked_ids)
        for story, profile, community_name in rows
    ]


async def create_story(
    *,
    user_id: str,
    content: str,
    media_url: str | None = None,
    media_type: str | None = None,
    community_id: str | None = None,
) -> StoryOut:
    async with get_session() as session:
        community_name = None
        if community_id:
            community = await session.get(Community, community_id)
            if community is None:
                raise NotFoundError(
                    "Community not found",
                    code="COMMUNITY_NOT_FOUND",
                    detail={"community_id": community_id},
                )
            community_name = community.name

        story = Story(
            user_id=user_id,
            content=content,
            media_url=media_url,
            media_type=media_type if media_url else None,
            community_id=community_id,
            likes_count=0,
            comments_count=0,
        )
        session.add(story)
        await session.flush()
        await session.refresh(story)

        profile = (await session.execute(select(Profile).where(Profile.user_id == user_id))).scalar_one_or_none()

    logger.info(f"[stories] created id={story.id} user_id={user_id} media={media_type or 'none'}")
    return _story_out(story, profile, community_name, liked=False)


async def _get_story(session, story_id: str) -> Story:
    story = await session.get(Story, story_id)
    if story is None:
        raise NotFoundError("Story not found", code="STORY_NOT_FOUND", detail={"story_id": story_id})
    return story


async def toggle_like(*, story_id: str, user_id: str) -> LikeResult:
    """Like the story if not yet liked by the user, otherwise unlike it."""
    async with get_session() as session:
        story = await _get_story(session, story_id)

        existing = await session.execute(
            select(StoryLike.id).where(StoryLike.story_id == story_id, StoryLike.user_id == user_id)
        )
        like_id = existing.scalar_one_or_none()

        if like_id is None:
            session.add(StoryLike(story_id=story_id, user_id=user_id))
            try:
                await session.flush()
            except IntegrityError as e:
                raise ConflictError("Story already liked", code="ALREADY_LIKED") from e
            delta = 1
        else:
            await session.execute(delete(StoryLike).where(StoryLike.id == like_id))
            delta = -1

        await session.execute(
            update(Story)
            .where(Story.id == story_id)
            .values(likes_count=func.greatest(func.coalesce(Story.likes_count, 0) + delta, 0))
        )
        await session.flush()
        await session.refresh(story)

        return LikeResult(liked=delta > 0, likes_count=story.likes_count or 0)


async def list_comments(story_id: str) -> list[CommentOut]:
    """Comments on a story, newest first."""
    async with get_session() as session:
        await _get_story(session, story_id)
        rows = (
            await session.execute(
                select(StoryComment, Profile)
                .outerjoin(Profile, Profile.user_id == StoryComment.user_id)
                .where(StoryComment.story_id == story_id)
                .order_by(StoryComment.created_at.desc())
            )
        ).all()

    return [
        CommentOut(
            id=comment.id,
            user_id=comment.user_id,
            content=comment.content,
            created_at=comment.created_at,
            author=_author(profile, comment.user_id),
        )
        for comment, profile in rows
    ]


async def add_comment(*, story_id: str, user_id: str, content: str) -> CommentOut:
    async with get_session() as session:
        await _get_story(session, story_id)

        comment = StoryComment(story_id=story_id, user_id=user_id, content=content)
        session.add(comment)
        await session.execute(
            update(Story)
            .where(Story.id == story_id)
            .values(comments_count=func.coalesce(Story.comments_count, 0) + 1)
        )
        await session.flush()
        await session.refresh(comment)

        profile = (await session.execute(select(Profile).where(Profile.user_id == user_id))).scalar_one_or_none()

    return CommentOut(
        id=comment.id,
        user_id=user_id,
        content=comment.content,
        created_at=comment.created_at,
        author=_author(profile, user_id),
    )


async def get_share_payload(story_id: str) -> SharePayload:
    async with get_session() as session:
        story = await _get_story(session, story_id)
        content = story.content

    base = get_settings().public_app_url.rstrip("/")
    return SharePayload(
        title="Green Community Story",
        text=share_text(content),
        url=f"{base}/stories?story={story_id}",
    )
