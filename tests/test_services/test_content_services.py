"""Tests for skills, experience, education and social link services."""

from __future__ import annotations

from datetime import date

import pytest

from portfolio_cms.core.exceptions import ConflictError, NotFoundError, ValidationError
from portfolio_cms.services.educations import EducationService
from portfolio_cms.services.experiences import ExperienceService, normalize_period
from portfolio_cms.services.portfolios import PortfolioService
from portfolio_cms.services.skills import SkillCategoryService, SkillService
from portfolio_cms.services.social_links import SocialLinkService


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_skill_display_order_appends(session, user):
    service = SkillService(session)
    first = await service.create_skill(user.id, {"name": "Python"})
    second = await service.create_skill(user.id, {"name": "Go"})
    pinned = await service.create_skill(user.id, {"name": "Rust", "display_order": 9})
    last = await service.create_skill(user.id, {"name": "SQL"})
    assert [first.display_order, second.display_order] == [0, 1]
    assert pinned.display_order == 9
    assert last.display_order == 10


@pytest.mark.asyncio
async def test_skill_category_must_exist_and_be_owned(session, user, other_user):
    service = SkillService(session)
    with pytest.raises(NotFoundError):
        await service.create_skill(user.id, {"name": "Python", "category_id": "missing"})

    theirs = await SkillCategoryService(session).create({"name": "Ops"}, user_id=other_user.id)
    with pytest.raises(ValidationError, match="another user"):
        await service.create_skill(user.id, {"name": "Python", "category_id": theirs.id})


@pytest.mark.asyncio
async def test_deleting_category_uncategorises_skills(session, user):
    categories = SkillCategoryService(session)
    category = await categories.create({"name": "Backend"}, user_id=user.id)
    skill = await SkillService(session).create_skill(
        user.id, {"name": "Python", "category_id": category.id}
    )

    await categories.delete_category(category)
    await session.refresh(skill)
    assert skill.category_id is None
    assert skill.deleted_at is None
    with pytest.raises(NotFoundError):
        await categories.get(category.id)


@pytest.mark.asyncio
async def test_skill_listing_sort_and_filters(session, user):
    service = SkillService(session)
    await service.create_skill(
        user.id, {"name": "Python", "years_of_experience": 8, "proficiency_level": "expert"}
    )
    await service.create_skill(user.id, {"name": "Go", "years_of_experience": 2})

    by_years = await service.list_for_user(user.id, sort_by="years_of_experience", sort_order="desc")
    assert [s.name for s in by_years.items] == ["Python", "Go"]

    seasoned = await service.list_for_user(user.id, min_years=5)
    assert [s.name for s in seasoned.items] == ["Python"]

    experts = await service.list_for_user(user.id, proficiency_level="expert")
    assert experts.total == 1

    with pytest.raises(ValidationError, match="Cannot sort by"):
        await service.list_for_user(user.id, sort_by="password_hash")


@pytest.mark.asyncio
async def test_endorse_increments(session, user):
    service = SkillService(session)
    skill = await service.create_skill(user.id, {"name": "Python"})
    skill = await service.endorse(skill)
    skill = await service.endorse(skill)
    assert skill.endorsement_count == 2


# ---------------------------------------------------------------------------
# Experience and education periods
# ---------------------------------------------------------------------------
def test_normalize_period_current_clears_end_date():
    data = normalize_period(
        {"is_current": True, "start_date": date(2020, 1, 1), "end_date": date(2019, 1, 1)}
    )
    assert data["end_date"] is None


def test_normalize_period_rejects_inverted_dates():
    with pytest.raises(ValidationError, match="end_date cannot be before start_date"):
        normalize_period({"start_date": date(2020, 1, 1), "end_date": date(2019, 1, 1)})


def test_normalize_period_uses_stored_values_for_partial_updates():
    with pytest.raises(ValidationError):
        normalize_period({"end_date": date(2019, 1, 1)}, start=date(2020, 1, 1))
    assert normalize_period({"position": "Lead"}, current=True)["end_date"] is None


@pytest.mark.asyncio
async def test_experience_update_turning_current(session, user):
    service = ExperienceService(session)
    exp = await service.create_experience(
        user.id,
        {
            "company_name": "Acme",
            "position": "Engineer",
            "start_date": date(2020, 1, 1),
            "end_date": date(2022, 6, 30),
        },
    )
    exp = await service.update_experience(exp, {"is_current": True})
    assert exp.is_current is True
    assert exp.end_date is None


@pytest.mark.asyncio
async def test_experience_technology_filter(session, user):
    service = ExperienceService(session)
    await service.create_experience(
        user.id,
        {
            "company_name": "Acme",
            "position": "Engineer",
            "start_date": date(2020, 1, 1),
            "technologies": ["Python", "PostgreSQL"],
        },
    )
    await service.create_experience(
        user.id,
        {
            "company_name": "Globex",
            "position": "Developer",
            "start_date": date(2018, 1, 1),
            "technologies": ["Java"],
        },
    )
    page = await service.list_for_user(user.id, technology="python")
    assert page.total == 1
    assert page.items[0].company_name == "Acme"


@pytest.mark.asyncio
async def test_education_verify_and_portfolio_attachment(session, user, other_user):
    service = EducationService(session)
    edu = await service.create_education(
        user.id,
        {"institution_name": "MIT", "degree": "BSc", "start_date": date(2010, 9, 1)},
    )

    with pytest.raises(ValidationError):
        await service.verify(edu, "   ")
    edu = await service.verify(edu, " registrar ")
    assert edu.is_verified is True
    assert edu.verification_method == "registrar"
    assert edu.verification_date is not None

    with pytest.raises(NotFoundError):
        await service.attach_to_portfolio(edu, "missing")
    theirs = await PortfolioService(session).create_for_user(other_user, {"name": "Bob"})
    with pytest.raises(ValidationError):
        await service.attach_to_portfolio(edu, theirs.id)

    mine = await PortfolioService(session).create_for_user(user, {"name": "Alice"})
    edu = await service.attach_to_portfolio(edu, mine.id)
    assert edu.portfolio_id == mine.id
    edu = await service.detach_from_portfolio(edu)
    assert edu.portfolio_id is None


# ---------------------------------------------------------------------------
# Social links
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_social_link_platform_is_unique_per_user(session, user, other_user):
    service = SocialLinkService(session)
    await service.create_link(user.id, {"platform": "github", "url": "https://github.com/a"})
    await service.create_link(other_user.id, {"platform": "github", "url": "https://github.com/b"})
    with pytest.raises(ConflictError):
        await service.create_link(user.id, {"platform": "github", "url": "https://github.com/c"})


@pytest.mark.asyncio
async def test_social_link_update_platform_conflict(session, user):
    service = SocialLinkService(session)
    await service.create_link(user.id, {"platform": "github", "url": "https://github.com/a"})
    link = await service.create_link(user.id, {"platform": "medium", "url": "https://medium.com/@a"})
    assert link.display_order == 1
    with pytest.raises(ConflictError):
        await service.update_link(link, {"platform": "github"})
    link = await service.update_link(link, {"platform": "medium", "label": "Blog"})
    assert link.label == "Blog"


@pytest.mark.asyncio
async def test_social_link_navigation_clicks_and_toggles(session, user):
    service = SocialLinkService(session)
    nav = await service.create_link(
        user.id, {"platform": "github", "url": "https://github.com/a", "show_in_nav": True}
    )
    other = await service.create_link(user.id, {"platform": "medium", "url": "https://medium.com/@a"})

    assert [l.id for l in await service.navigation(user.id)] == [nav.id]

    nav = await service.track_click(nav)
    assert nav.click_count == 1

    nav = await service.toggle_active(nav)
    assert nav.is_active is False
    assert await service.navigation(user.id) == []

    updated = await service.bulk_set_active(user.id, [nav.id, other.id], True)
    assert updated == 2
    await session.refresh(nav)
    assert nav.is_active is True


@pytest.mark.asyncio
async def test_social_link_delete_is_permanent(session, user):
    service = SocialLinkService(session)
    link = await service.create_link(user.id, {"platform": "github", "url": "https://github.com/a"})
    await service.soft_delete(link)
    with pytest.raises(NotFoundError):
        await service.get(link.id)
