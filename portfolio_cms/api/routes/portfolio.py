"""Portfolio endpoints: owner management and the public portfolio payload."""

import logging

from fastapi import APIRouter, Query

from portfolio_cms.api.auth import AdminUser, CurrentUser
from portfolio_cms.api.deps import Cache, DbSession, Pagination, invalidate_owner
from portfolio_cms.api.schemas.common import MessageResponse, Paginated, page_of
from portfolio_cms.api.schemas.portfolio import (
    FeatureRequest,
    PortfolioCreate,
    PortfolioRead,
    PortfolioUpdate,
    PublicPortfolioRead,
)
from portfolio_cms.services.portfolios import PortfolioService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/portfolio", tags=["Portfolio"])


# ---------------------------------------------------------------------------
# Owner
# ---------------------------------------------------------------------------
@router.get("", response_model=PortfolioRead)
async def get_my_portfolio(user: CurrentUser, session: DbSession):
    return await PortfolioService(session).get_for_user(user)


@router.post("", response_model=PortfolioRead, status_code=201)
async def create_portfolio(
    body: PortfolioCreate, user: CurrentUser, session: DbSession, cache: Cache
):
    portfolio = await PortfolioService(session).create_for_user(
        user, body.model_dump(exclude_none=True)
    )
    await invalidate_owner(cache, session, user.id)
    return portfolio


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------
@router.get("/published", response_model=Paginated[PortfolioRead])
async def list_published(session: DbSession, params: Pagination, cache: Cache):
    page_key = f"{params.page}:{params.size}:{params.search or ''}"
    if cache is not None:
        cached = await cache.get_published(page_key)
        if cached is not None:
            return cached
    result = await PortfolioService(session).list_published(
        search=params.search, page=params.page, size=params.size
    )
    payload = page_of(PortfolioRead, result)
    if cache is not None:
        await cache.set_published(page_key, payload.model_dump(mode="json"))
    return payload


@router.get("/featured", response_model=list[PortfolioRead])
async def list_featured(session: DbSession, limit: int = Query(6, ge=1, le=50)):
    return await PortfolioService(session).list_featured(limit)


@router.get("/public/{identifier}", response_model=PublicPortfolioRead)
async def get_public_portfolio(identifier: str, session: DbSession, cache: Cache):
    """Full public payload by portfolio id or owner username."""
    if cache is not None:
        cached = await cache.get_public(identifier)
        if cached is not None:
            return cached
    public = await PortfolioService(session).get_public(identifier)
    payload = PublicPortfolioRead.model_validate(public)
    if cache is not None:
        await cache.set_public(
            [public.portfolio.id, public.owner.username],
            payload.model_dump(mode="json"),
        )
    return payload


# ---------------------------------------------------------------------------
# By id
# ---------------------------------------------------------------------------
@router.get("/{portfolio_id}", response_model=PortfolioRead)
async def get_portfolio(portfolio_id: str, user: CurrentUser, session: DbSession):
    return await PortfolioService(session).get_owned(portfolio_id, user)


@router.patch("/{portfolio_id}", response_model=PortfolioRead)
async def update_portfolio(
    portfolio_id: str,
    body: PortfolioUpdate,
    user: CurrentUser,
    session: DbSession,
    cache: Cache,
):
    service = PortfolioService(session)
    portfolio = await service.get_owned(portfolio_id, user)
    portfolio = await service.update_portfolio(
        portfolio, body.model_dump(exclude_unset=True)
    )
    await invalidate_owner(cache, session, portfolio.user_id)
    return portfolio


@router.patch("/{portfolio_id}/feature", response_model=PortfolioRead)
async def feature_portfolio(
    portfolio_id: str,
    body: FeatureRequest,
    admin: AdminUser,
    session: DbSession,
    cache: Cache,
):
    service = PortfolioService(session)
    portfolio = await service.update(
        await service.get(portfolio_id), {"is_featured": body.is_featured}
    )
    logger.info("Portfolio %s featured=%s", portfolio.id, portfolio.is_featured)
    await invalidate_owner(cache, session, portfolio.user_id)
    return portfolio


@router.delete("/{portfolio_id}", response_model=MessageResponse)
async def delete_portfolio(
    portfolio_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = PortfolioService(session)
    portfolio = await service.get_owned(portfolio_id, user)
    await service.soft_delete(portfolio)
    await invalidate_owner(cache, session, portfolio.user_id)
    return MessageResponse(message="Portfolio deleted successfully")


@router.post("/{portfolio_id}/restore", response_model=PortfolioRead)
async def restore_portfolio(
    portfolio_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = PortfolioService(session)
    service.ensure_owner(await service.get(portfolio_id, include_deleted=True), user)
    portfolio = await service.restore(portfolio_id)
    await invalidate_owner(cache, session, portfolio.user_id)
    return portfolio
