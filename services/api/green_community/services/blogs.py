"""Blog service.

Write rules applied on create:
- excerpt defaults to the first 200 chars of content + "..."
- tags are trimmed, lowercased and de-duplicated (empty list stored as NULL)
- read_time = ceil(words / 200) where words = content.split(" ")
- published_at is set when the blog is published
"""

from datetime import datetime, timezone
import json
import logging
import math

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from green_community.models import Blog, BlogComment, BlogLike, Profile
from green_community.schemas import Author, LikeResult
from green_community.schemas.blogs import BlogOut
from green_community.schemas.stories import CommentOut
from green_community.services.errors import ConflictError, ForbiddenError, NotFoundError
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 200


def calculate_read_time(content: str) -> int:
    """Reading time in minutes (single-space word split, 200 wpm)."""
    words = len(content.split(" "))
    return math.ceil(words / WORDS_PER_MINUTE)


def build_excerpt(content: str, excerpt: str | None = None) -> str:
    if excerpt and excerpt.strip():
        return excerpt.strip()
    return content[:EXCERPT_LENGTH] + "..."


def normalize_tags(tags: list[str] | None) -> list[str] | None:
    """Trim, lowercase and de-duplicate tags, keeping first-seen order."""
    if not tags:
        return None
    seen: list[str] = []
    for tag in tags:
        value = tag.strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen or None


def _load_tags(tags_json: str | None) -> list[str] | None:
    if not tags_json:
        return None
    try:
        tags = json.loads(tags_json)
    except json.JSONDecodeError:
        return None
    return tags if isinstance(tags, list) else None


def _blog_out(blog: Blog, profile: Profile | None, liked: bool = False) -> BlogOut:
    author = (
        Author(user_id=blog.user_id, eco_name=profile.eco_name, avatar_url=profile.avatar_url)
        if profile is not None
        else Author(user_id=blog.user_id, eco_name="Unknown")
    )
    return BlogOut(
        id=blog.id,
        user_id=blog.user_id,
        title=blog.title,
        content=blog.content,
        excerpt=blog.excerpt,
        cover_image_url=blog.cover_image_url,
        tags=_load_tags(blog.tags_json),
        published=bool(blog.published),
        published_at=blog.published_at,
        read_time=blog.read_time,
        likes_count=blog.likes_count or 0,
        comments_count=blog.comments_count or 0,
        created_at=blog.created_at,
        author=author,
        liked=liked,
    )


async def _liked_ids(session, viewer_id: str | None, blog_ids: list[str]) -> set[str]:
    if not viewer_id or not blog_ids:
        return set()
    result = await session.execute(
        select(BlogLike.blog_id).where(BlogLike.user_id == viewer_id, BlogLike.blog_id.in_(blog_ids))
    )
    return set(result.scalars().all())


async def list_published(*, viewer_id: str | None = None, limit: int = 50) -> list[BlogOut]:
    """Published blogs, most recently published first."""
    async with get_session() as session:
        rows = (
            await session.execute(
                select(Blog, Profile)
                .outerjoin(Profile, Profile.user_id == Blog.user_id)
                .where(Blog.published.is_(True))
                .order_by(Blog.published_at.desc())
                .limit(limit)
            )
        ).all()
        liked = await _liked_ids(session, viewer_id, [blog.id for blog, _ in rows])

    return [_blog_out(blog, profile, blog.id in liked) for blog, profile in rows]


async def list_mine(user_id: str) -> list[BlogOut]:
    """All of the user's blogs including drafts, newest first."""
    async with get_session() as session:
        rows = (
            await session.execute(
                select(Blog, Profile)
                .outerjoin(Profile, Profile.user_id == Blog.user_id)
                .where(Blog.user_id == user_id)
                .order_by(Blog.created_at.desc())
            )
        ).all()
        liked = await _liked_ids(session, user_id, [blog.id for blog, _ in rows])

    return [_blog_out(blog, profile, blog.id in liked) for blog, profile in rows]


async def get_blog(blog_id: str, *, viewer_id: str | None = None) -> BlogOut:
    """A published blog, or a draft when the viewer is its author."""
    async with get_session() as session:
        row = (
            await session.execute(
                select(Blog, Profile)
                .outerjoin(Profile, Profile.user_id == Blog.user_id)
                .where(Blog.id == blog_id)
            )
        ).first()
        if row is None or (not row[0].published and row[0].user_id != viewer_id):
            raise NotFoundError("Blog not found", code="BLOG_NOT_FOUND", detail={"blog_id": blog_id})
        blog, profile = row
        liked = await _liked_ids(session, viewer_id, [blog.id])

    return _blog_out(blog, profile, blog.id in liked)


async def create_blog(
    *,
    user_id: str,
    title: str,
    content: str,
    excerpt: str | None = None,
    tags: list[str] | None = None,
    cover_image_url: str | None = None,
    published: bool = True,
) -> BlogOut:
    normalized = normalize_tags(tags)
    async with get_session() as session:
        blog = Blog(
            user_id=user_id,
            title=title,
            content=content,
            excerpt=build_excerpt(content, excerpt),
            tags_json=json.dumps(normalized) if normalized else None,
            cover_image_url=cover_image_url,
            published=published,
            published_at=datetime.now(timezone.utc) if published else None,
            read_time=calculate_read_time(content),
            likes_count=0,
            comments_count=0,
        )
        session.add(blog)
        await session.flush()
        await session.refresh(blog)

        profile = (await session.execute(select(Profile).where(Profile.user_id == user_id))).scalar_one_or_none()

    logger.info(f"[blogs] created id={blog.id} user_id={user_id} published={published} read_time={blog.read_time}")
    return _blog_out(blog, profile)


async def publish_blog(*, blog_id: str, user_id: str) -> BlogOut:
    """Publish the caller's own draft. Already-published blogs are returned as-is."""
    async with get_session() as session:
        blog = await session.get(Blog, blog_id)
        if blog is None:
            raise NotFoundError("Blog not found", code="BLOG_NOT_FOUND", detail={"blog_id": blog_id})
        if blog.user_id != user_id:
            raise ForbiddenError("Only the author can publish this blog", code="NOT_AUTHOR")

        if not blog.published:
            blog.published = True
            blog.published_at = datetime.now(timezone.utc)
            await session.flush()
            await session.refresh(blog)
            logger.info(f"[blogs] published id={blog_id}")

        profile = (await session.execute(select(Profile).where(Profile.user_id == user_id))).scalar_one_or_none()

    return _blog_out(blog, profile)


async def _get_visible_blog(session, blog_id: str) -> Blog:
    blog = await session.get(Blog, blog_id)
    if blog is None or not blog.published:
        raise NotFoundError("Blog not found", code="BLOG_NOT_FOUND", detail={"blog_id": blog_id})
    return blog


async def toggle_like(*, blog_id: str, user_id: str) -> LikeResult:
    async with get_session() as session:
        blog = await _get_visible_blog(session, blog_id)

        existing = await session.execute(
            select(BlogLike.id).where(BlogLike.blog_id == blog_id, BlogLike.user_id == user_id)
        )
        like_id = existing.scalar_one_or_none()

        if like_id is None:
            session.add(BlogLike(blog_id=blog_id, user_id=user_id))
            try:
                await session.flush()
            except IntegrityError as e:
                raise ConflictError("Blog already liked", code="ALREADY_LIKED") from e
            delta = 1
        else:
            await session.execute(delete(BlogLike).where(BlogLike.id == like_id))
            delta = -1

        await session.execute(
            update(Blog)
            .where(Blog.id == blog_id)
            .values(likes_count=func.greatest(func.coalesce(Blog.likes_count, 0) + delta, 0))
        )
        await session.flush()
        await session.refresh(blog)

        return LikeResult(liked=delta > 0, likes_count=blog.likes_count or 0)


async def list_comments(blog_id: str) -> list[CommentOut]:
    """Comments on a blog, oldest first."""
    async with get_session() as session:
        await _get_visible_blog(session, blog_id)
        rows = (
            await session.execute(
                select(BlogComment, Profile)
                .outerjoin(Profile, Profile.user_id == BlogComment.user_id)
                .where(BlogComment.blog_id == blog_id)
                .order_by(BlogComment.created_at.asc())
            )
        ).all()

    comments = []
    for comment, profile in rows:
        author = (
            Author(user_id=comment.user_id, eco_name=profile.eco_name, avatar_url=profile.avatar_url)
            if profile is not None
            else Author(user_id=comment.user_id, eco_name="Unknown")
        )
        comments.append(
            CommentOut(
                id=comment.id,
                user_id=comment.user_id,
                content=comment.content,
                created_at=comment.created_at,
                author=author,
            )
        )
    return comments


async def add_comment(*, blog_id: str, user_id: str, content: str) -> CommentOut:
    async with get_session() as session:
        await _get_visible_blog(session, blog_id)

        comment = BlogComment(blog_id=blog_id, user_id=user_id, content=content)
        session.add(comment)
        await session.execute(
            update(Blog)
            .where(Blog.id == blog_id)
            .values(comments_count=func.coalesce(Blog.comments_count, 0) + 1)
        )
        await session.flush()
        await session.refresh(comment)

        profile = (await session.execute(select(Profile).where(Profile.user_id == user_id))).scalar_one_or_none()

    return CommentOut(
        id=comment.id,
        user_id=user_id,
        content=comment.content,
        created_at=comment.created_at,
        author=Author(
            user_id=user_id,
            eco_name=profile.eco_name if profile else "Unknown",
            avatar_url=profile.avatar_url if profile else None,
        ),
    )
