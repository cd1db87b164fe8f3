"""Blog endpoints."""

from fastapi import APIRouter, Query, status

from green_community.routes.deps import AuthUser, OptionalUser
from green_community.schemas import LikeResult
from green_community.schemas.blogs import BlogCreate, BlogOut
from green_community.schemas.stories import CommentCreate, CommentOut
from green_community.services import blogs as blog_service

router = APIRouter()


@router.get("", response_model=list[BlogOut])
async def list_blogs(
    user: OptionalUser,
    limit: int = Query(default=50, ge=1, le=200),
) -> list[BlogOut]:
    """Published blogs, most recently published first."""
    return await blog_service.list_published(viewer_id=user.user_id if user else None, limit=limit)


@router.get("/mine", response_model=list[BlogOut])
async def list_my_blogs(user: AuthUser) -> list[BlogOut]:
    return await blog_service.list_mine(user.user_id)


@router.get("/{blog_id}", response_model=BlogOut)
async def get_blog(blog_id: str, user: OptionalUser) -> BlogOut:
    return await blog_service.get_blog(blog_id, viewer_id=user.user_id if user else None)


@router.post("", response_model=BlogOut, status_code=status.HTTP_201_CREATED)
async def create_blog(body: BlogCreate, user: AuthUser) -> BlogOut:
    return await blog_service.create_blog(
        user_id=user.user_id,
        title=body.title,
        content=body.content,
        excerpt=body.excerpt,
        tags=body.tags,
        cover_image_url=body.cover_image_url,
        published=body.published,
    )


@router.post("/{blog_id}/publish", response_model=BlogOut)
async def publish_blog(blog_id: str, user: AuthUser) -> BlogOut:
    return await blog_service.publish_blog(blog_id=blog_id, user_id=user.user_id)


@router.post("/{blog_id}/like", response_model=LikeResult)
async def toggle_like(blog_id: str, user: AuthUser) -> LikeResult:
    return await blog_service.toggle_like(blog_id=blog_id, user_id=user.user_id)


@router.get("/{blog_id}/comments", response_model=list[CommentOut])
async def list_comments(blog_id: str) -> list[CommentOut]:
    return await blog_service.list_comments(blog_id)


@router.post("/{blog_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(blog_id: str, body: CommentCreate, user: AuthUser) -> CommentOut:
    return await blog_service.add_comment(blog_id=blog_id, user_id=user.user_id, content=body.content)
