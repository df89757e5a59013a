"""Page-view tracking and owner-only portfolio analytics reports."""

import logging

from fastapi import APIRouter, Query, Request

from portfolio_cms.api.auth import CurrentUser
from portfolio_cms.api.deps import DbSession
from portfolio_cms.api.schemas.engagement import (
    PageViewCreate,
    PageViewRead,
    TrackResponse,
    VisitorJourney,
    VisitorRead,
)
from portfolio_cms.core.enums import AnalyticsPeriod
from portfolio_cms.services.analytics import AnalyticsService
from portfolio_cms.services.portfolios import PortfolioService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.post("/track", response_model=TrackResponse, status_code=201)
async def track_page_view(body: PageViewCreate, request: Request, session: DbSession):
    """Record one public page view; no authentication required."""
    return await AnalyticsService(session).track_page_view(
        body.model_dump(),
        user_agent=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )


@router.get("/portfolio/{portfolio_id}")
async def portfolio_summary(
    portfolio_id: str,
    user: CurrentUser,
    session: DbSession,
    period: AnalyticsPeriod = Query(AnalyticsPeriod.MONTH),
) -> dict:
    # Only the owner (or an admin) may read a portfolio's analytics
    await PortfolioService(session).get_owned(portfolio_id, user)
    return await AnalyticsService(session).portfolio_summary(portfolio_id, period.value)


@router.get("/portfolio/{portfolio_id}/realtime")
async def portfolio_realtime(portfolio_id: str, user: CurrentUser, session: DbSession) -> dict:
    await PortfolioService(session).get_owned(portfolio_id, user)
    return await AnalyticsService(session).realtime(portfolio_id)


@router.get("/portfolio/{portfolio_id}/referrers")
async def portfolio_referrers(
    portfolio_id: str,
    user: CurrentUser,
    session: DbSession,
    days: int = Query(30, ge=1, le=365),
) -> list[dict]:
    await PortfolioService(session).get_owned(portfolio_id, user)
    return await AnalyticsService(session).top_referrers(portfolio_id, days)


@router.get("/portfolio/{portfolio_id}/funnel")
async def portfolio_funnel(
    portfolio_id: str,
    user: CurrentUser,
    session: DbSession,
    steps: str = Query(..., min_length=1, description="Comma-separated page paths"),
    days: int = Query(30, ge=1, le=365),
) -> list[dict]:
    await PortfolioService(session).get_owned(portfolio_id, user)
    return await AnalyticsService(session).conversion_funnel(
        portfolio_id, steps.split(","), days
    )


@router.get(
    "/portfolio/{portfolio_id}/visitors/{visitor_id}/journey",
    response_model=VisitorJourney,
)
async def visitor_journey(
    portfolio_id: str, visitor_id: str, user: CurrentUser, session: DbSession
):
    await PortfolioService(session).get_owned(portfolio_id, user)
    journey = await AnalyticsService(session).visitor_journey(portfolio_id, visitor_id)
    return VisitorJourney(
        **{
            **journey,
            "visitor": VisitorRead.model_validate(journey["visitor"]),
            "journey": [PageViewRead.model_validate(v) for v in journey["journey"]],
        }
    )
