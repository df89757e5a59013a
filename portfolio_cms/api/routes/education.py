"""Education endpoints, including verification and portfolio attachment."""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from portfolio_cms.api.auth import AdminUser, CurrentUser
from portfolio_cms.api.deps import Cache, DbSession, Pagination, invalidate_owner
from portfolio_cms.api.schemas.common import (
    MessageResponse,
    Paginated,
    ReorderRequest,
    page_of,
)
from portfolio_cms.api.schemas.content import (
    AttachPortfolioRequest,
    EducationCreate,
    EducationRead,
    EducationUpdate,
    VerifyEducationRequest,
)
from portfolio_cms.core.enums import EducationType
from portfolio_cms.services.educations import EducationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/education", tags=["Education"])


@router.get("", response_model=Paginated[EducationRead])
async def list_education(
    user: CurrentUser,
    session: DbSession,
    params: Pagination,
    education_type: Optional[EducationType] = Query(None),
    is_current: Optional[bool] = Query(None),
    is_highlighted: Optional[bool] = Query(None),
    portfolio_id: Optional[str] = Query(None),
):
    result = await EducationService(session).list_for_user(
        user.id,
        education_type=education_type.value if education_type else None,
        is_current=is_current,
        is_highlighted=is_highlighted,
        portfolio_id=portfolio_id,
        search=params.search,
        page=params.page,
        size=params.size,
    )
    return page_of(EducationRead, result)


@router.post("", response_model=EducationRead, status_code=201)
async def create_education(
    body: EducationCreate, user: CurrentUser, session: DbSession, cache: Cache
):
    education = await EducationService(session).create_education(
        user.id, body.model_dump()
    )
    await invalidate_owner(cache, session, user.id)
    return education


@router.get("/user/{user_id}", response_model=Paginated[EducationRead])
async def public_education(user_id: str, session: DbSession, params: Pagination):
    result = await EducationService(session).list_for_user(
        user_id, search=params.search, page=params.page, size=params.size
    )
    return page_of(EducationRead, result)


@router.post("/reorder", response_model=list[EducationRead])
async def reorder_education(
    body: ReorderRequest, user: CurrentUser, session: DbSession, cache: Cache
):
    records = await EducationService(session).reorder(user.id, body.ids)
    await invalidate_owner(cache, session, user.id)
    return records


@router.get("/{education_id}", response_model=EducationRead)
async def get_education(education_id: str, session: DbSession):
    return await EducationService(session).get(education_id)


@router.patch("/{education_id}", response_model=EducationRead)
async def update_education(
    education_id: str,
    body: EducationUpdate,
    user: CurrentUser,
    session: DbSession,
    cache: Cache,
):
    service = EducationService(session)
    education = await service.get_owned(education_id, user)
    education = await service.update_education(
        education, body.model_dump(exclude_unset=True)
    )
    await invalidate_owner(cache, session, education.user_id)
    return education


@router.post("/{education_id}/verify", response_model=EducationRead)
async def verify_education(
    education_id: str,
    body: VerifyEducationRequest,
    admin: AdminUser,
    session: DbSession,
    cache: Cache,
):
    service = EducationService(session)
    education = await service.verify(
        await service.get(education_id), body.verification_method
    )
    logger.info("Education %s verified by %s", education.id, admin.id)
    await invalidate_owner(cache, session, education.user_id)
    return education


@router.post("/{education_id}/attach", response_model=EducationRead)
async def attach_education(
    education_id: str,
    body: AttachPortfolioRequest,
    user: CurrentUser,
    session: DbSession,
    cache: Cache,
):
    service = EducationService(session)
    education = await service.get_owned(education_id, user)
    education = await service.attach_to_portfolio(education, body.portfolio_id)
    await invalidate_owner(cache, session, education.user_id)
    return education


@router.post("/{education_id}/detach", response_model=EducationRead)
async def detach_education(
    education_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = EducationService(session)
    education = await service.get_owned(education_id, user)
    education = await service.detach_from_portfolio(education)
    await invalidate_owner(cache, session, education.user_id)
    return education


@router.delete("/{education_id}", response_model=MessageResponse)
async def delete_education(
    education_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = EducationService(session)
    education = await service.get_owned(education_id, user)
    await service.soft_delete(education)
    await invalidate_owner(cache, session, education.user_id)
    return MessageResponse(message="Education deleted successfully")


@router.post("/{education_id}/restore", response_model=EducationRead)
async def restore_education(
    education_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = EducationService(session)
    service.ensure_owner(await service.get(education_id, include_deleted=True), user)
    education = await service.restore(education_id)
    await invalidate_owner(cache, session, education.user_id)
    return education
