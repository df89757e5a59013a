"""Contact form submission and owner inbox endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request

from portfolio_cms.api.auth import CurrentUser
from portfolio_cms.api.deps import DbSession, Pagination
from portfolio_cms.api.limiter import AUTH_LIMIT, limiter
from portfolio_cms.api.schemas.common import MessageResponse, Paginated, page_of
from portfolio_cms.api.schemas.engagement import (
    ContactCreate,
    ContactRead,
    ContactStatusUpdate,
)
from portfolio_cms.core.enums import ContactStatus
from portfolio_cms.services.contacts import ContactService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post("", response_model=ContactRead, status_code=201)
@limiter.limit(AUTH_LIMIT)
async def submit_contact(request: Request, body: ContactCreate, session: DbSession):
    """Public contact form; the message is delivered to the portfolio owner."""
    data = body.model_dump()
    portfolio_id = data.pop("portfolio_id")
    return await ContactService(session).submit(portfolio_id, data)


@router.get("", response_model=Paginated[ContactRead])
async def inbox(
    user: CurrentUser,
    session: DbSession,
    params: Pagination,
    status: Optional[ContactStatus] = Query(None),
):
    result = await ContactService(session).inbox(
        user.id,
        status=status.value if status else None,
        search=params.search,
        page=params.page,
        size=params.size,
    )
    return page_of(ContactRead, result)


@router.get("/stats")
async def contact_stats(user: CurrentUser, session: DbSession) -> dict:
    return await ContactService(session).stats(user.id)


@router.get("/{contact_id}", response_model=ContactRead)
async def get_contact(contact_id: str, user: CurrentUser, session: DbSession):
    return await ContactService(session).get_owned(contact_id, user)


@router.patch("/{contact_id}/status", response_model=ContactRead)
async def set_contact_status(
    contact_id: str, body: ContactStatusUpdate, user: CurrentUser, session: DbSession
):
    service = ContactService(session)
    contact = await service.get_owned(contact_id, user)
    return await service.set_status(contact, body.status)


@router.delete("/{contact_id}", response_model=MessageResponse)
async def delete_contact(contact_id: str, user: CurrentUser, session: DbSession):
    service = ContactService(session)
    await service.permanent_delete(await service.get_owned(contact_id, user))
    return MessageResponse(message="Contact deleted successfully")
