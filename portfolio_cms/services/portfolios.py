"""Portfolio management and public portfolio assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, or_, select

from portfolio_cms.core.enums import BlogStatus, BlogVisibility, Visibility
from portfolio_cms.core.exceptions import ConflictError, NotFoundError
from portfolio_cms.core.models import (
    Blog,
    Education,
    Experience,
    Portfolio,
    Project,
    Skill,
    SkillCategory,
    SocialLink,
    User,
)
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, BaseService, Page

PUBLIC_VISIBILITIES = (Visibility.PUBLIC.value, Visibility.UNLISTED.value)


@dataclass
class SkillGroup:
    category: Optional[SkillCategory]
    skills: list[Skill] = field(default_factory=list)


@dataclass
class PublicPortfolio:
    """Everything the public site renders for one portfolio."""

    portfolio: Portfolio
    owner: User
    projects: list[Project]
    experiences: list[Experience]
    educations: list[Education]
    skill_groups: list[SkillGroup]
    social_links: list[SocialLink]
    blogs: list[Blog]


class PortfolioService(BaseService[Portfolio]):
    model = Portfolio
    label = "Portfolio"
    search_fields = ("name", "title", "summary")

    def default_order(self) -> list[Any]:
        return [Portfolio.published_at.desc(), Portfolio.created_at.desc()]

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------
    async def get_for_user(self, user: User) -> Portfolio:
        return await self.get(user.id)

    async def create_for_user(self, user: User, data: dict[str, Any]) -> Portfolio:
        existing = await self.session.get(Portfolio, user.id)
        if existing is not None and existing.deleted_at is not None:
            raise ConflictError(
                "A deleted portfolio exists for this user; restore it instead"
            )
        if existing is not None:
            raise ConflictError("Portfolio already exists for this user")

        data = dict(data)
        links = data.pop("social_links", None)
        portfolio = Portfolio(id=user.id, user_id=user.id, **data)
        if portfolio.is_published:
            portfolio.published_at = datetime.now(timezone.utc)
        self.session.add(portfolio)
        await self.session.flush()
        if links:
            await self._replace_social_links(user.id, portfolio.id, links)
        portfolio = await self.save(portfolio)
        self.log.info("portfolio_created", portfolio_id=portfolio.id)
        return portfolio

    async def update_portfolio(
        self, portfolio: Portfolio, data: dict[str, Any]
    ) -> Portfolio:
        data = dict(data)
        links = data.pop("social_links", None)
        for key, value in data.items():
            setattr(portfolio, key, value)
        # published_at records the first publication only
        if portfolio.is_published and portfolio.published_at is None:
            portfolio.published_at = datetime.now(timezone.utc)
        if links is not None:
            await self._replace_social_links(portfolio.user_id, portfolio.id, links)
        portfolio = await self.save(portfolio)
        self.log.info("portfolio_updated", portfolio_id=portfolio.id)
        return portfolio

    async def _replace_social_links(
        self, user_id: str, portfolio_id: str, links: list[dict[str, Any]]
    ) -> None:
        await self.session.execute(delete(SocialLink).where(SocialLink.user_id == user_id))
        for index, link in enumerate(links):
            link = dict(link)
            link.setdefault("display_order", index)
            self.session.add(
                SocialLink(user_id=user_id, portfolio_id=portfolio_id, **link)
            )

    # ------------------------------------------------------------------
    # Public listings
    # ------------------------------------------------------------------
    def _published_query(self):
        return self.base_query().where(
            Portfolio.is_published.is_(True),
            Portfolio.visibility == Visibility.PUBLIC.value,
        )

    async def list_published(
        self, search: str | None = None, page: int = 1, size: int = DEFAULT_PAGE_SIZE
    ) -> Page[Portfolio]:
        stmt = self.apply_search(self._published_query(), search)
        return await self.paginate(stmt, page, size)

    async def list_featured(self, limit: int = 6) -> list[Portfolio]:
        stmt = (
            self._published_query()
            .where(Portfolio.is_featured.is_(True))
            .order_by(*self.default_order())
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def resolve_public(self, identifier: str) -> Portfolio:
        """Find a publicly viewable portfolio by id or owner username."""
        stmt = (
            self.base_query()
            .join(User, User.id == Portfolio.user_id)
            .where(
                or_(Portfolio.id == identifier, User.username == identifier),
                User.deleted_at.is_(None),
                Portfolio.is_published.is_(True),
                Portfolio.visibility.in_(PUBLIC_VISIBILITIES),
            )
        )
        portfolio = (await self.session.execute(stmt)).scalars().first()
        if portfolio is None:
            raise NotFoundError(f"Portfolio {identifier} not found")
        return portfolio

    async def get_public(self, identifier: str) -> PublicPortfolio:
        portfolio = await self.resolve_public(identifier)
        owner = await self.session.get(User, portfolio.user_id)
        user_id = portfolio.user_id

        async def _owned(model, *order):
            stmt = (
                select(model)
                .where(model.user_id == user_id, model.deleted_at.is_(None))
                .order_by(*order)
            )
            return list((await self.session.execute(stmt)).scalars().all())

        projects = await _owned(
            Project, Project.display_order, Project.created_at.desc()
        )
        experiences = await _owned(
            Experience,
            Experience.is_current.desc(),
            Experience.start_date.desc(),
            Experience.display_order,
        )
        educations = await _owned(
            Education, Education.display_order, Education.start_date.desc()
        )
        categories = await _owned(
            SkillCategory, SkillCategory.display_order, SkillCategory.name
        )
        skills = await _owned(Skill, Skill.display_order, Skill.name)
        blogs = [
            b
            for b in await _owned(Blog, Blog.published_at.desc())
            if b.status == BlogStatus.PUBLISHED.value
            and b.visibility == BlogVisibility.PUBLIC.value
        ]
        links_stmt = (
            select(SocialLink)
            .where(SocialLink.user_id == user_id, SocialLink.is_active.is_(True))
            .order_by(SocialLink.display_order)
        )
        social_links = list((await self.session.execute(links_stmt)).scalars().all())

        return PublicPortfolio(
            portfolio=portfolio,
            owner=owner,
            projects=projects,
            experiences=experiences,
            educations=educations,
            skill_groups=group_skills(categories, skills),
            social_links=social_links,
            blogs=blogs,
        )


def group_skills(
    categories: list[SkillCategory], skills: list[Skill]
) -> list[SkillGroup]:
    """Bucket skills under their visible categories; leftovers go last."""
    groups = {c.id: SkillGroup(category=c) for c in categories if c.is_visible}
    hidden = {c.id for c in categories if not c.is_visible}
    uncategorised = SkillGroup(category=None)
    for skill in skills:
        if skill.category_id in groups:
            groups[skill.category_id].skills.append(skill)
        elif skill.category_id not in hidden:
            uncategorised.skills.append(skill)
    result = list(groups.values())
    if uncategorised.skills:
        result.append(uncategorised)
    return result
