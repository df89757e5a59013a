"""Work experience endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from portfolio_cms.api.auth import CurrentUser
from portfolio_cms.api.deps import Cache, DbSession, Pagination, invalidate_owner
from portfolio_cms.api.schemas.common import (
    MessageResponse,
    Paginated,
    ReorderRequest,
    page_of,
)
from portfolio_cms.api.schemas.content import (
    ExperienceCreate,
    ExperienceRead,
    ExperienceUpdate,
)
from portfolio_cms.core.enums import EmploymentType
from portfolio_cms.services.experiences import ExperienceService
from portfolio_cms.services.portfolios import PortfolioService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/experience", tags=["Experience"])


@router.get("", response_model=Paginated[ExperienceRead])
async def list_experiences(
    user: CurrentUser,
    session: DbSession,
    params: Pagination,
    employment_type: Optional[EmploymentType] = Query(None),
    is_current: Optional[bool] = Query(None),
    is_highlighted: Optional[bool] = Query(None),
    technology: Optional[str] = Query(None, max_length=100),
):
    result = await ExperienceService(session).list_for_user(
        user.id,
        employment_type=employment_type.value if employment_type else None,
        is_current=is_current,
        is_highlighted=is_highlighted,
        technology=technology,
        search=params.search,
        page=params.page,
        size=params.size,
    )
    return page_of(ExperienceRead, result)


@router.post("", response_model=ExperienceRead, status_code=201)
async def create_experience(
    body: ExperienceCreate, user: CurrentUser, session: DbSession, cache: Cache
):
    experience = await ExperienceService(session).create_experience(
        user.id, body.model_dump()
    )
    await invalidate_owner(cache, session, user.id)
    return experience


@router.get("/user/{user_id}", response_model=Paginated[ExperienceRead])
async def public_experiences_by_user(
    user_id: str, session: DbSession, params: Pagination
):
    result = await ExperienceService(session).list_for_user(
        user_id, search=params.search, page=params.page, size=params.size
    )
    return page_of(ExperienceRead, result)


@router.get("/portfolio/{portfolio_id}", response_model=Paginated[ExperienceRead])
async def public_experiences_by_portfolio(
    portfolio_id: str, session: DbSession, params: Pagination
):
    """Experience shown on a publicly viewable portfolio."""
    portfolio = await PortfolioService(session).resolve_public(portfolio_id)
    result = await ExperienceService(session).list_for_user(
        portfolio.user_id, page=params.page, size=params.size
    )
    return page_of(ExperienceRead, result)


@router.post("/reorder", response_model=list[ExperienceRead])
async def reorder_experiences(
    body: ReorderRequest, user: CurrentUser, session: DbSession, cache: Cache
):
    experiences = await ExperienceService(session).reorder(user.id, body.ids)
    await invalidate_owner(cache, session, user.id)
    return experiences


@router.get("/{experience_id}", response_model=ExperienceRead)
async def get_experience(experience_id: str, session: DbSession):
    return await ExperienceService(session).get(experience_id)


@router.patch("/{experience_id}", response_model=ExperienceRead)
async def update_experience(
    experience_id: str,
    body: ExperienceUpdate,
    user: CurrentUser,
    session: DbSession,
    cache: Cache,
):
    service = ExperienceService(session)
    experience = await service.get_owned(experience_id, user)
    experience = await service.update_experience(
        experience, body.model_dump(exclude_unset=True)
    )
    await invalidate_owner(cache, session, experience.user_id)
    return experience


@router.delete("/{experience_id}", response_model=MessageResponse)
async def delete_experience(
    experience_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = ExperienceService(session)
    experience = await service.get_owned(experience_id, user)
    await service.soft_delete(experience)
    await invalidate_owner(cache, session, experience.user_id)
    return MessageResponse(message="Experience deleted successfully")


@router.post("/{experience_id}/restore", response_model=ExperienceRead)
async def restore_experience(
    experience_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = ExperienceService(session)
    service.ensure_owner(await service.get(experience_id, include_deleted=True), user)
    experience = await service.restore(experience_id)
    await invalidate_owner(cache, session, experience.user_id)
    return experience
