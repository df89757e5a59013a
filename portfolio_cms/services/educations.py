"""Education history."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from portfolio_cms.core.exceptions import NotFoundError, ValidationError
from portfolio_cms.core.models import Education, Portfolio
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, BaseService, Page
from portfolio_cms.services.experiences import normalize_period


class EducationService(BaseService[Education]):
    model = Education
    label = "Education"
    search_fields = ("institution_name", "degree", "field_of_study")

    def default_order(self) -> list[Any]:
        return [
            Education.display_order,
            Education.is_current.desc(),
            Education.start_date.desc(),
        ]

    async def create_education(self, user_id: str, data: dict[str, Any]) -> Education:
        return await self.create(normalize_period(data), user_id=user_id)

    async def update_education(
        self, education: Education, data: dict[str, Any]
    ) -> Education:
        data = normalize_period(
            data, education.start_date, education.end_date, education.is_current
        )
        return await self.update(education, data)

    async def list_for_user(
        self,
        user_id: str,
        *,
        education_type: str | None = None,
        is_current: bool | None = None,
        is_highlighted: bool | None = None,
        portfolio_id: str | None = None,
        search: str | None = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Education]:
        filters = {
            "user_id": user_id,
            "education_type": education_type,
            "is_current": is_current,
            "is_highlighted": is_highlighted,
            "portfolio_id": portfolio_id,
        }
        return await self.list(filters=filters, search=search, page=page, size=size)

    async def verify(self, education: Education, method: str) -> Education:
        if not method.strip():
            raise ValidationError("Verification method is required")
        education.is_verified = True
        education.verification_date = datetime.now(timezone.utc)
        education.verification_method = method.strip()
        return await self.save(education)

    async def attach_to_portfolio(
        self, education: Education, portfolio_id: str
    ) -> Education:
        portfolio = await self.session.get(Portfolio, portfolio_id)
        if portfolio is None or portfolio.deleted_at is not None:
            raise NotFoundError(f"Portfolio with ID {portfolio_id} not found")
        if portfolio.user_id != education.user_id:
            raise ValidationError("Portfolio belongs to another user")
        education.portfolio_id = portfolio_id
        return await self.save(education)

    async def detach_from_portfolio(self, education: Education) -> Education:
        education.portfolio_id = None
        return await self.save(education)
