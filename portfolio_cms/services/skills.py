"""Skills and skill categories."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select, update

from portfolio_cms.core.exceptions import NotFoundError, ValidationError
from portfolio_cms.core.models import Skill, SkillCategory
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, BaseService, Page
from portfolio_cms.services.portfolios import SkillGroup, group_skills

SORTABLE_FIELDS = {
    "name",
    "proficiency_level",
    "years_of_experience",
    "display_order",
    "endorsement_count",
    "created_at",
}


class SkillCategoryService(BaseService[SkillCategory]):
    model = SkillCategory
    label = "Skill category"
    search_fields = ("name", "description")

    def default_order(self) -> list[Any]:
        return [SkillCategory.display_order, SkillCategory.name]

    async def delete_category(self, category: SkillCategory) -> None:
        # Skills survive their category and become uncategorised
        await self.session.execute(
            update(Skill)
            .where(Skill.category_id == category.id)
            .values(category_id=None)
        )
        await self.soft_delete(category)


class SkillService(BaseService[Skill]):
    model = Skill
    label = "Skill"
    search_fields = ("name", "description")

    def default_order(self) -> list[Any]:
        return [Skill.display_order, Skill.name]

    async def _check_category(self, user_id: str, category_id: str | None) -> None:
        if category_id is None:
            return
        category = await self.session.get(SkillCategory, category_id)
        if category is None or category.deleted_at is not None:
            raise NotFoundError(f"Skill category with ID {category_id} not found")
        if category.user_id != user_id:
            raise ValidationError("Skill category belongs to another user")

    async def create_skill(self, user_id: str, data: dict[str, Any]) -> Skill:
        await self._check_category(user_id, data.get("category_id"))
        if data.get("display_order") is None:
            current = await self.session.execute(
                select(func.max(Skill.display_order)).where(
                    Skill.user_id == user_id, Skill.deleted_at.is_(None)
                )
            )
            highest = current.scalar_one_or_none()
            data = {**data, "display_order": 0 if highest is None else highest + 1}
        return await self.create(data, user_id=user_id)

    async def update_skill(self, skill: Skill, data: dict[str, Any]) -> Skill:
        if "category_id" in data:
            await self._check_category(skill.user_id, data["category_id"])
        return await self.update(skill, data)

    async def list_for_user(
        self,
        user_id: str,
        *,
        category_id: str | None = None,
        proficiency_level: str | None = None,
        min_years: float | None = None,
        is_featured: bool | None = None,
        search: str | None = None,
        sort_by: str = "display_order",
        sort_order: str = "asc",
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Skill]:
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(
                f"Cannot sort by {sort_by}; choose one of {', '.join(sorted(SORTABLE_FIELDS))}"
            )
        stmt = self.apply_filters(
            self.base_query(),
            {
                "user_id": user_id,
                "category_id": category_id,
                "proficiency_level": proficiency_level,
                "is_featured": is_featured,
            },
        )
        if min_years is not None:
            stmt = stmt.where(Skill.years_of_experience >= min_years)
        stmt = self.apply_search(stmt, search)
        column = getattr(Skill, sort_by)
        order = column.desc() if sort_order.lower() == "desc" else column.asc()
        return await self.paginate(stmt, page, size, order_by=[order, Skill.name])

    async def endorse(self, skill: Skill) -> Skill:
        skill.endorsement_count = (skill.endorsement_count or 0) + 1
        return await self.save(skill)

    async def grouped(self, user_id: str) -> list[SkillGroup]:
        categories = await SkillCategoryService(self.session).all_for_user(user_id)
        return group_skills(categories, await self.all_for_user(user_id))
