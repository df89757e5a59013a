"""Cache package for the Portfolio CMS.

Exports:
- ``PortfolioCache`` -- Redis-backed cache for public portfolio reads
- ``get_portfolio_cache`` -- FastAPI async dependency returning a PortfolioCache,
  or ``None`` when caching is disabled
"""

from typing import Optional

from portfolio_cms.cache.portfolio_cache import PortfolioCache
from portfolio_cms.core.config import settings
from portfolio_cms.core.redis import get_redis


async def get_portfolio_cache() -> Optional[PortfolioCache]:
    """FastAPI dependency that returns a :class:`PortfolioCache` instance.

    Usage in route handlers::

        @router.get("/some-endpoint")
        async def handler(cache: PortfolioCache | None = Depends(get_portfolio_cache)):
            ...
    """
    if not settings.cache_enabled:
        return None
    redis = await get_redis()
    return PortfolioCache(redis)


__all__ = ["PortfolioCache", "get_portfolio_cache"]
