"""Tests for PortfolioService: ownership, publishing and the public view."""

from __future__ import annotations

from datetime import date

import pytest

from portfolio_cms.core.exceptions import ConflictError, NotFoundError
from portfolio_cms.core.models import Skill, SkillCategory
from portfolio_cms.services.blogs import BlogService
from portfolio_cms.services.experiences import ExperienceService
from portfolio_cms.services.portfolios import PortfolioService, group_skills
from portfolio_cms.services.projects import ProjectService
from portfolio_cms.services.skills import SkillCategoryService, SkillService
from portfolio_cms.services.social_links import SocialLinkService
from portfolio_cms.services.users import UserService


async def _publish(session, user, **extra):
    data = {"name": f"{user.username} portfolio", "is_published": True, **extra}
    return await PortfolioService(session).create_for_user(user, data)


# ---------------------------------------------------------------------------
# Owner operations
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_portfolio_id_matches_owner(session, user):
    portfolio = await PortfolioService(session).create_for_user(user, {"name": "Mine"})
    assert portfolio.id == user.id
    assert portfolio.user_id == user.id
    assert portfolio.is_published is False
    assert portfolio.published_at is None
    assert (await PortfolioService(session).get_for_user(user)).id == portfolio.id


@pytest.mark.asyncio
async def test_second_portfolio_conflicts(session, user):
    service = PortfolioService(session)
    await service.create_for_user(user, {"name": "First"})
    with pytest.raises(ConflictError):
        await service.create_for_user(user, {"name": "Second"})


@pytest.mark.asyncio
async def test_deleted_portfolio_must_be_restored(session, user):
    service = PortfolioService(session)
    portfolio = await service.create_for_user(user, {"name": "First"})
    await service.soft_delete(portfolio)
    with pytest.raises(NotFoundError):
        await service.get_for_user(user)

    with pytest.raises(ConflictError, match="restore it instead"):
        await service.create_for_user(user, {"name": "Again"})

    restored = await service.restore(user.id)
    assert restored.name == "First"
    assert (await service.get_for_user(user)).id == user.id


@pytest.mark.asyncio
async def test_nested_social_links_created(session, user):
    await PortfolioService(session).create_for_user(
        user,
        {
            "name": "Mine",
            "social_links": [
                {"platform": "github", "url": "https://github.com/alice"},
                {"platform": "linkedin", "url": "https://linkedin.com/in/alice"},
            ],
        },
    )
    links = await SocialLinkService(session).all_for_user(user.id)
    assert [(l.platform, l.display_order) for l in links] == [
        ("github", 0),
        ("linkedin", 1),
    ]
    assert all(l.portfolio_id == user.id for l in links)


@pytest.mark.asyncio
async def test_published_at_is_set_once(session, user):
    service = PortfolioService(session)
    portfolio = await service.create_for_user(user, {"name": "Mine"})

    portfolio = await service.update_portfolio(portfolio, {"is_published": True})
    first = portfolio.published_at
    assert first is not None

    portfolio = await service.update_portfolio(portfolio, {"is_published": False})
    portfolio = await service.update_portfolio(portfolio, {"is_published": True})
    assert portfolio.published_at == first


# ---------------------------------------------------------------------------
# Public listings
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_published_only_public(session, user, other_user, admin):
    await _publish(session, user, summary="Backend engineer")
    await _publish(session, other_user, visibility="unlisted")
    await PortfolioService(session).create_for_user(admin, {"name": "Draft"})

    page = await PortfolioService(session).list_published()
    assert [p.id for p in page.items] == [user.id]
    assert page.total == 1

    searched = await PortfolioService(session).list_published(search="backend")
    assert searched.total == 1
    assert (await PortfolioService(session).list_published(search="nothing")).total == 0


@pytest.mark.asyncio
async def test_list_featured(session, user, other_user):
    await _publish(session, user, is_featured=True)
    await _publish(session, other_user)
    featured = await PortfolioService(session).list_featured()
    assert [p.id for p in featured] == [user.id]


@pytest.mark.asyncio
async def test_resolve_public_by_id_or_username(session, user):
    await _publish(session, user, visibility="unlisted")
    service = PortfolioService(session)
    assert (await service.resolve_public(user.id)).id == user.id
    assert (await service.resolve_public("alice")).id == user.id


@pytest.mark.asyncio
async def test_resolve_public_hides_private_and_drafts(session, user, other_user):
    service = PortfolioService(session)
    await _publish(session, user, visibility="private")
    await service.create_for_user(other_user, {"name": "Draft"})
    with pytest.raises(NotFoundError):
        await service.resolve_public("alice")
    with pytest.raises(NotFoundError):
        await service.resolve_public("bob")


@pytest.mark.asyncio
async def test_resolve_public_hides_deleted_owner(session, user):
    await _publish(session, user)
    await UserService(session).soft_delete(user)
    with pytest.raises(NotFoundError):
        await PortfolioService(session).resolve_public("alice")


@pytest.mark.asyncio
async def test_get_public_assembles_content(session, user, other_user):
    await _publish(
        session,
        user,
        social_links=[
            {"platform": "github", "url": "https://github.com/alice"},
            {"platform": "twitter", "url": "https://x.com/alice", "is_active": False},
        ],
    )
    projects = ProjectService(session)
    await projects.create({"title": "Visible"}, user_id=user.id)
    gone = await projects.create({"title": "Removed"}, user_id=user.id)
    await projects.soft_delete(gone)
    await projects.create({"title": "Not mine"}, user_id=other_user.id)

    await ExperienceService(session).create_experience(
        user.id,
        {"company_name": "Acme", "position": "Engineer", "start_date": date(2020, 1, 1)},
    )
    blogs = BlogService(session)
    await blogs.create_post(user.id, {"title": "Live", "content": "hello", "status": "published"})
    await blogs.create_post(user.id, {"title": "Draft", "content": "soon"})

    public = await PortfolioService(session).get_public("alice")
    assert public.owner.id == user.id
    assert [p.title for p in public.projects] == ["Visible"]
    assert [e.company_name for e in public.experiences] == ["Acme"]
    assert [l.platform for l in public.social_links] == ["github"]
    assert [b.title for b in public.blogs] == ["Live"]
    assert public.skill_groups == []


# ---------------------------------------------------------------------------
# Skill grouping
# ---------------------------------------------------------------------------
def test_group_skills_orders_and_filters():
    frontend = SkillCategory(id="c1", name="Frontend", is_visible=True)
    secret = SkillCategory(id="c2", name="Secret", is_visible=False)
    react = Skill(id="s1", name="React", category_id="c1")
    hidden = Skill(id="s2", name="Hidden", category_id="c2")
    loose = Skill(id="s3", name="Git", category_id=None)

    groups = group_skills([frontend, secret], [react, hidden, loose])
    assert [g.category for g in groups] == [frontend, None]
    assert [s.name for s in groups[0].skills] == ["React"]
    assert [s.name for s in groups[1].skills] == ["Git"]


def test_group_skills_omits_empty_uncategorised_bucket():
    frontend = SkillCategory(id="c1", name="Frontend", is_visible=True)
    groups = group_skills([frontend], [])
    assert len(groups) == 1
    assert groups[0].skills == []


@pytest.mark.asyncio
async def test_grouped_skills_for_user(session, user):
    category = await SkillCategoryService(session).create(
        {"name": "Backend"}, user_id=user.id
    )
    skills = SkillService(session)
    await skills.create_skill(user.id, {"name": "Python", "category_id": category.id})
    await skills.create_skill(user.id, {"name": "Docker"})

    groups = await skills.grouped(user.id)
    assert [g.category.name if g.category else None for g in groups] == ["Backend", None]
    assert [s.name for s in groups[1].skills] == ["Docker"]
