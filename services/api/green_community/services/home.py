"""Landing page statistics, cached in Redis.

If Redis is unavailable (e.g. tests / local minimal env), counts are computed
on every call and caching is skipped.
"""

import logging

from redis.exceptions import RedisError
from sqlalchemy import func, select

from green_community.models import Blog, Challenge, Community, Story
from green_community.schemas import HomeStats
from green_community.settings import get_settings
from green_community.stores.postgres import get_session
from green_community.stores.redis import get_home_stats_cache, set_home_stats_cache

logger = logging.getLogger("uvicorn.error")


async def get_home_stats() -> HomeStats:
    """Exact counts of communities, stories, blogs and challenges."""
    cached = await _try_get_cached_stats()
    if cached is not None:
        return cached

    async with get_session() as session:
        stats = HomeStats(
            communities=await session.scalar(select(func.count(Community.id))) or 0,
            stories=await session.scalar(select(func.count(Story.id))) or 0,
            blogs=await session.scalar(select(func.count(Blog.id))) or 0,
            challenges=await session.scalar(select(func.count(Challenge.id))) or 0,
        )

    await _try_set_cached_stats(stats)
    return stats


async def _try_get_cached_stats() -> HomeStats | None:
    try:
        payload = await get_home_stats_cache()
    except (RuntimeError, RedisError):
        return None
    if not payload:
        return None
    try:
        return HomeStats(**payload)
    except (TypeError, ValueError):
        return None


async def _try_set_cached_stats(stats: HomeStats) -> None:
    ttl = get_settings().home_stats_ttl
    if ttl <= 0:
        return
    try:
        await set_home_stats_cache(stats.model_dump(), ttl=ttl)
    except (RuntimeError, RedisError) as e:
        logger.warning(f"Home stats cache unavailable: {e}")
