"""Project CRUD."""

from __future__ import annotations

from typing import Any

from portfolio_cms.core.models import Project
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, BaseService, Page


class ProjectService(BaseService[Project]):
    model = Project
    label = "Project"
    search_fields = ("title", "description")

    def default_order(self) -> list[Any]:
        return [Project.display_order, Project.created_at.desc()]

    async def list_for_user(
        self,
        user_id: str,
        *,
        category: str | None = None,
        status: str | None = None,
        featured: bool | None = None,
        portfolio_id: str | None = None,
        search: str | None = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Project]:
        filters = {
            "user_id": user_id,
            "category": category,
            "status": status,
            "featured": featured,
            "portfolio_id": portfolio_id,
        }
        return await self.list(filters=filters, search=search, page=page, size=size)

    async def list_featured(self, user_id: str, limit: int = 6) -> list[Project]:
        stmt = (
            self.base_query()
            .where(Project.user_id == user_id, Project.featured.is_(True))
            .order_by(*self.default_order())
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def categories(self, user_id: str) -> list[str]:
        projects = await self.all_for_user(user_id)
        return sorted({p.category for p in projects if p.category})
