"""Work experience entries."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from portfolio_cms.core.exceptions import ValidationError
from portfolio_cms.core.models import Experience
from portfolio_cms.services.base import (
    DEFAULT_PAGE_SIZE,
    BaseService,
    Page,
    clamp_pagination,
)


def normalize_period(
    data: dict[str, Any],
    start: Optional[date] = None,
    end: Optional[date] = None,
    current: bool = False,
) -> dict[str, Any]:
    """Clear end_date for current entries and reject inverted periods.

    *start*, *end* and *current* are the stored values used for fields
    absent from a partial update.
    """
    data = dict(data)
    is_current = data.get("is_current", current)
    if is_current:
        data["end_date"] = None
        return data
    start_date = data.get("start_date", start)
    end_date = data.get("end_date", end)
    if start_date and end_date and end_date < start_date:
        raise ValidationError("end_date cannot be before start_date")
    return data


class ExperienceService(BaseService[Experience]):
    model = Experience
    label = "Experience"
    search_fields = ("company_name", "position", "description")

    def default_order(self) -> list[Any]:
        return [
            Experience.is_current.desc(),
            Experience.start_date.desc(),
            Experience.display_order,
        ]

    async def create_experience(self, user_id: str, data: dict[str, Any]) -> Experience:
        return await self.create(normalize_period(data), user_id=user_id)

    async def update_experience(
        self, experience: Experience, data: dict[str, Any]
    ) -> Experience:
        data = normalize_period(
            data, experience.start_date, experience.end_date, experience.is_current
        )
        return await self.update(experience, data)

    async def list_for_user(
        self,
        user_id: str,
        *,
        employment_type: str | None = None,
        is_current: bool | None = None,
        is_highlighted: bool | None = None,
        technology: str | None = None,
        portfolio_id: str | None = None,
        search: str | None = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Experience]:
        stmt = self.apply_search(
            self.apply_filters(
                self.base_query(),
                {
                    "user_id": user_id,
                    "employment_type": employment_type,
                    "is_current": is_current,
                    "is_highlighted": is_highlighted,
                    "portfolio_id": portfolio_id,
                },
            ),
            search,
        )
        if not technology:
            return await self.paginate(stmt, page, size)

        # JSON list membership is evaluated in Python for portability
        rows = await self.session.execute(stmt.order_by(*self.default_order()))
        needle = technology.strip().lower()
        matches = [
            e
            for e in rows.scalars().all()
            if any(needle == t.lower() for t in (e.technologies or []))
        ]
        page, size = clamp_pagination(page, size)
        start = (page - 1) * size
        return Page(items=matches[start : start + size], total=len(matches))
