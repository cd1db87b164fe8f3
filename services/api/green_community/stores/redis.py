"""Redis store for caching and the fallback cart.

Handles:
- Caching with TTL policies
- Per-user cart hashes used when the shopping_cart table is unavailable

TTL policies:
- Home stats payload: 30-300 seconds (configurable)
- Fallback cart: 30 days, refreshed on every write
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from green_community.settings import get_settings

# TTL constants (in seconds)
TTL_HOME_STATS = 60  # 1 minute
TTL_FALLBACK_CART = 2592000  # 30 days

# Key prefixes
PREFIX_HOME_STATS = "home:stats"
PREFIX_CART = "cart:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache."""
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Set value in cache with TTL.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds.
    """
    await _get_redis().setex(key, ttl, value)


async def cache_delete(key: str) -> None:
    """Delete value from cache."""
    await _get_redis().delete(key)


async def cache_get_json(key: str) -> dict[str, Any] | None:
    """Get JSON value from cache.

    Returns:
        Parsed JSON dict or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: dict[str, Any], ttl: int) -> None:
    """Set JSON value in cache."""
    await cache_set(key, json.dumps(value), ttl)


# ============================================================
# Home stats cache
# ============================================================


async def get_home_stats_cache() -> dict[str, Any] | None:
    """Get cached home statistics payload."""
    return await cache_get_json(PREFIX_HOME_STATS)


async def set_home_stats_cache(payload: dict[str, Any], ttl: int = TTL_HOME_STATS) -> None:
    """Cache home statistics payload."""
    await cache_set_json(PREFIX_HOME_STATS, payload, ttl)


# ============================================================
# Fallback cart (hash of product_id -> quantity)
# ============================================================


def _cart_key(user_id: str) -> str:
    return f"{PREFIX_CART}{user_id}"


async def get_fallback_cart(user_id: str) -> dict[str, int]:
    """Get the fallback cart for a user.

    Returns:
        Mapping of product_id -> quantity (empty if no cart).
    """
    raw = await _get_redis().hgetall(_cart_key(user_id))
    cart: dict[str, int] = {}
    for product_id, quantity in raw.items():
        try:
            cart[product_id] = int(quantity)
        except (TypeError, ValueError):
            continue
    return cart


async def set_fallback_cart_item(user_id: str, product_id: str, quantity: int) -> None:
    """Set quantity for a product in the fallback cart."""
    key = _cart_key(user_id)
    client = _get_redis()
    await client.hset(key, product_id, quantity)
    await client.expire(key, TTL_FALLBACK_CART)


async def remove_fallback_cart_item(user_id: str, product_id: str) -> None:
    """Remove a product from the fallback cart."""
    await _get_redis().hdel(_cart_key(user_id), product_id)


async def clear_fallback_cart(user_id: str) -> None:
    """Drop the whole fallback cart for a user."""
    await cache_delete(_cart_key(user_id))
