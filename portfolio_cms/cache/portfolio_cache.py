"""Redis caching layer for public portfolio endpoints.

TTL tiers:
- Public portfolio payload: 300 seconds -- assembled from many tables
- Published listing:         60 seconds -- changes whenever anyone publishes

Any write to content owned by a user drops that user's public payload
(keyed both by portfolio id and by username) and the published listing.
Redis failures are logged and behave as cache misses.

Usage::

    from portfolio_cms.cache import get_portfolio_cache

    cache = await get_portfolio_cache()
    payload = await cache.get_public(username)
    if payload is None:
        payload = build_payload()
        await cache.set_public(username, payload)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Default TTLs (seconds)
# ---------------------------------------------------------------------------
TTL_PUBLIC = 300
TTL_PUBLISHED = 60

# Key prefix for all portfolio cache entries
KEY_PREFIX = "portfolio:"


class PortfolioCache:
    """Redis-backed cache for public portfolio reads.

    Parameters
    ----------
    redis_client : redis.asyncio.Redis
        An async Redis client instance (from ``portfolio_cms.core.redis.get_redis``).
    """

    def __init__(self, redis_client: aioredis.Redis) -> None:
        self._redis = redis_client

    # ------------------------------------------------------------------
    # Public portfolio payload -- 300s TTL
    # ------------------------------------------------------------------
    async def get_public(self, key: str) -> Optional[dict]:
        """Retrieve the cached payload for a portfolio id or username."""
        return await self._get(f"{KEY_PREFIX}public:{key}")

    async def set_public(
        self, keys: list[str], data: dict, ttl: int = TTL_PUBLIC
    ) -> None:
        """Cache one payload under every key it can be requested by."""
        for key in keys:
            await self._set(f"{KEY_PREFIX}public:{key}", data, ttl)

    # ------------------------------------------------------------------
    # Published listing -- 60s TTL
    # ------------------------------------------------------------------
    async def get_published(self, page_key: str) -> Optional[dict]:
        return await self._get(f"{KEY_PREFIX}published:{page_key}")

    async def set_published(
        self, page_key: str, data: dict, ttl: int = TTL_PUBLISHED
    ) -> None:
        await self._set(f"{KEY_PREFIX}published:{page_key}", data, ttl)

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------
    async def invalidate_user(self, user_id: str, username: Optional[str] = None) -> None:
        """Drop a user's public payload and every published-listing page."""
        try:
            keys = [f"{KEY_PREFIX}public:{user_id}"]
            if username:
                keys.append(f"{KEY_PREFIX}public:{username}")
            await self._redis.delete(*keys)
            cursor = 0
            while True:
                cursor, found = await self._redis.scan(
                    cursor=cursor, match=f"{KEY_PREFIX}published:*", count=100
                )
                if found:
                    await self._redis.delete(*found)
                if cursor == 0:
                    break
            logger.debug("PortfolioCache: invalidated user %s", user_id)
        except Exception:
            logger.warning("PortfolioCache: invalidation failed", exc_info=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _get(self, key: str) -> Optional[Any]:
        try:
            raw = await self._redis.get(key)
        except Exception:
            logger.warning("PortfolioCache: GET %s failed", key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("PortfolioCache: corrupt entry at %s", key)
            return None

    async def _set(self, key: str, data: Any, ttl: int) -> None:
        try:
            await self._redis.set(key, json.dumps(data, default=str), ex=ttl)
        except Exception:
            logger.warning("PortfolioCache: SET %s failed", key, exc_info=True)
