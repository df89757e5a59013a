"""Contact-form submissions."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select

from portfolio_cms.core.enums import ContactStatus
from portfolio_cms.core.exceptions import NotFoundError
from portfolio_cms.core.models import Contact, Portfolio
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, BaseService, Page


class ContactService(BaseService[Contact]):
    model = Contact
    label = "Contact"
    search_fields = ("name", "email", "subject", "message")

    async def submit(self, portfolio_id: str, data: dict[str, Any]) -> Contact:
        portfolio = await self.session.get(Portfolio, portfolio_id)
        if portfolio is None or portfolio.deleted_at is not None:
            raise NotFoundError(f"Portfolio with ID {portfolio_id} not found")
        contact = await self.create(
            data,
            portfolio_id=portfolio.id,
            user_id=portfolio.user_id,
            status=ContactStatus.NEW.value,
        )
        self.log.info("contact_submitted", contact_id=contact.id, portfolio_id=portfolio_id)
        return contact

    async def inbox(
        self,
        user_id: str,
        *,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Contact]:
        return await self.list(
            filters={"user_id": user_id, "status": status},
            search=search,
            page=page,
            size=size,
        )

    async def set_status(self, contact: Contact, status: str) -> Contact:
        contact.status = status
        return await self.save(contact)

    async def stats(self, user_id: str) -> dict[str, int]:
        stmt = (
            select(Contact.status, func.count(Contact.id))
            .where(Contact.user_id == user_id)
            .group_by(Contact.status)
        )
        counts = {s.value: 0 for s in ContactStatus}
        for status, count in await self.session.execute(stmt):
            counts[status] = count
        counts["total"] = sum(counts.values())
        return counts
