"""FastAPI dependency injection for database sessions, pagination and cache."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_cms.cache import PortfolioCache, get_portfolio_cache
from portfolio_cms.core.database import async_session_factory
from portfolio_cms.core.models import User
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; auto-rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]
Cache = Annotated[Optional[PortfolioCache], Depends(get_portfolio_cache)]


@dataclass
class PageParams:
    page: int
    size: int
    search: Optional[str]


def page_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=200),
) -> PageParams:
    return PageParams(page=page, size=size, search=search)


Pagination = Annotated[PageParams, Depends(page_params)]


async def invalidate_owner(
    cache: Optional[PortfolioCache], session: AsyncSession, user_id: str
) -> None:
    """Drop cached public data for the owner of a just-written record."""
    if cache is None:
        return
    owner = await session.get(User, user_id)
    await cache.invalidate_user(user_id, owner.username if owner else None)
