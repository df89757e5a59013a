"""Social link endpoints."""

import logging

from fastapi import APIRouter

from portfolio_cms.api.auth import CurrentUser
from portfolio_cms.api.deps import Cache, DbSession, Pagination, invalidate_owner
from portfolio_cms.api.schemas.common import (
    MessageResponse,
    Paginated,
    ReorderRequest,
    page_of,
)
from portfolio_cms.api.schemas.engagement import (
    BulkActiveRequest,
    SocialLinkCreate,
    SocialLinkRead,
    SocialLinkUpdate,
)
from portfolio_cms.services.social_links import SocialLinkService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/social", tags=["Social"])


@router.get("", response_model=Paginated[SocialLinkRead])
async def list_links(user: CurrentUser, session: DbSession, params: Pagination):
    result = await SocialLinkService(session).list(
        filters={"user_id": user.id},
        search=params.search,
        page=params.page,
        size=params.size,
    )
    return page_of(SocialLinkRead, result)


@router.post("", response_model=SocialLinkRead, status_code=201)
async def create_link(
    body: SocialLinkCreate, user: CurrentUser, session: DbSession, cache: Cache
):
    link = await SocialLinkService(session).create_link(user.id, body.model_dump())
    await invalidate_owner(cache, session, user.id)
    return link


@router.get("/user/{user_id}/nav", response_model=list[SocialLinkRead])
async def navigation_links(user_id: str, session: DbSession):
    """Active links flagged for the public site navigation."""
    return await SocialLinkService(session).navigation(user_id)


@router.post("/reorder", response_model=list[SocialLinkRead])
async def reorder_links(
    body: ReorderRequest, user: CurrentUser, session: DbSession, cache: Cache
):
    links = await SocialLinkService(session).reorder(user.id, body.ids)
    await invalidate_owner(cache, session, user.id)
    return links


@router.post("/bulk-active", response_model=MessageResponse)
async def bulk_set_active(
    body: BulkActiveRequest, user: CurrentUser, session: DbSession, cache: Cache
):
    updated = await SocialLinkService(session).bulk_set_active(
        user.id, body.ids, body.is_active
    )
    await invalidate_owner(cache, session, user.id)
    return MessageResponse(message=f"{updated} social links updated")


@router.post("/{link_id}/click", response_model=SocialLinkRead)
async def track_click(link_id: str, session: DbSession):
    service = SocialLinkService(session)
    return await service.track_click(await service.get(link_id))


@router.post("/{link_id}/toggle", response_model=SocialLinkRead)
async def toggle_link(
    link_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = SocialLinkService(session)
    link = await service.toggle_active(await service.get_owned(link_id, user))
    await invalidate_owner(cache, session, link.user_id)
    return link


@router.get("/{link_id}", response_model=SocialLinkRead)
async def get_link(link_id: str, user: CurrentUser, session: DbSession):
    return await SocialLinkService(session).get_owned(link_id, user)


@router.patch("/{link_id}", response_model=SocialLinkRead)
async def update_link(
    link_id: str,
    body: SocialLinkUpdate,
    user: CurrentUser,
    session: DbSession,
    cache: Cache,
):
    service = SocialLinkService(session)
    link = await service.get_owned(link_id, user)
    link = await service.update_link(link, body.model_dump(exclude_unset=True))
    await invalidate_owner(cache, session, link.user_id)
    return link


@router.delete("/{link_id}", response_model=MessageResponse)
async def delete_link(
    link_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = SocialLinkService(session)
    link = await service.get_owned(link_id, user)
    owner_id = link.user_id
    await service.permanent_delete(link)
    await invalidate_owner(cache, session, owner_id)
    return MessageResponse(message="Social link deleted successfully")
