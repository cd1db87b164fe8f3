"""Story endpoints."""

from fastapi import APIRouter, Query, status

from green_community.routes.deps import AuthUser, OptionalUser
from green_community.schemas import LikeResult
from green_community.schemas.stories import CommentCreate, CommentOut, SharePayload, StoryCreate, StoryOut
from green_community.services import stories as story_service

router = APIRouter()


@router.get("", response_model=list[StoryOut])
async def list_stories(
    user: OptionalUser,
    community_id: str | None = Query(default=None, description="Only stories posted to this community"),
    limit: int = Query(default=50, ge=1, le=200),
) -> list[StoryOut]:
    """Newest first, with author and the caller's `liked` flag."""
    return await story_service.list_stories(
        community_id=community_id,
        viewer_id=user.user_id if user else None,
        limit=limit,
    )


@router.post("", response_model=StoryOut, status_code=status.HTTP_201_CREATED)
async def create_story(body: StoryCreate, user: AuthUser) -> StoryOut:
    return await story_service.create_story(
        user_id=user.user_id,
        content=body.content,
        media_url=body.media_url,
        media_type=body.media_type,
        community_id=body.community_id,
    )


@router.post("/{story_id}/like", response_model=LikeResult)
async def toggle_like(story_id: str, user: AuthUser) -> LikeResult:
    return await story_service.toggle_like(story_id=story_id, user_id=user.user_id)


@router.get("/{story_id}/comments", response_model=list[CommentOut])
async def list_comments(story_id: str) -> list[CommentOut]:
    return await story_service.list_comments(story_id)


@router.post("/{story_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(story_id: str, body: CommentCreate, user: AuthUser) -> CommentOut:
    return await story_service.add_comment(story_id=story_id, user_id=user.user_id, content=body.content)


@router.get("/{story_id}/share", response_model=SharePayload)
async def share_story(story_id: str) -> SharePayload:
    return await story_service.get_share_payload(story_id)
