"""Skill and skill-category endpoints."""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Query

from portfolio_cms.api.auth import CurrentUser
from portfolio_cms.api.deps import Cache, DbSession, Pagination, invalidate_owner
from portfolio_cms.api.schemas.common import (
    MessageResponse,
    Paginated,
    ReorderRequest,
    page_of,
)
from portfolio_cms.api.schemas.content import (
    SkillCategoryCreate,
    SkillCategoryRead,
    SkillCategoryUpdate,
    SkillCreate,
    SkillRead,
    SkillUpdate,
)
from portfolio_cms.api.schemas.portfolio import SkillGroupRead
from portfolio_cms.core.enums import ProficiencyLevel
from portfolio_cms.services.skills import SkillCategoryService, SkillService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/skills", tags=["Skills"])


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
@router.get("/categories", response_model=list[SkillCategoryRead])
async def list_categories(user: CurrentUser, session: DbSession):
    return await SkillCategoryService(session).all_for_user(user.id)


@router.post("/categories", response_model=SkillCategoryRead, status_code=201)
async def create_category(
    body: SkillCategoryCreate, user: CurrentUser, session: DbSession, cache: Cache
):
    category = await SkillCategoryService(session).create(
        body.model_dump(), user_id=user.id
    )
    await invalidate_owner(cache, session, user.id)
    return category


@router.post("/categories/reorder", response_model=list[SkillCategoryRead])
async def reorder_categories(
    body: ReorderRequest, user: CurrentUser, session: DbSession, cache: Cache
):
    categories = await SkillCategoryService(session).reorder(user.id, body.ids)
    await invalidate_owner(cache, session, user.id)
    return categories


@router.patch("/categories/{category_id}", response_model=SkillCategoryRead)
async def update_category(
    category_id: str,
    body: SkillCategoryUpdate,
    user: CurrentUser,
    session: DbSession,
    cache: Cache,
):
    service = SkillCategoryService(session)
    category = await service.get_owned(category_id, user)
    category = await service.update(category, body.model_dump(exclude_unset=True))
    await invalidate_owner(cache, session, category.user_id)
    return category


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = SkillCategoryService(session)
    category = await service.get_owned(category_id, user)
    await service.delete_category(category)
    await invalidate_owner(cache, session, category.user_id)
    return MessageResponse(message="Skill category deleted successfully")


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------
@router.get("", response_model=Paginated[SkillRead])
async def list_skills(
    user: CurrentUser,
    session: DbSession,
    params: Pagination,
    category_id: Optional[str] = Query(None),
    proficiency_level: Optional[ProficiencyLevel] = Query(None),
    min_years: Optional[float] = Query(None, ge=0),
    is_featured: Optional[bool] = Query(None),
    sort_by: str = Query("display_order"),
    sort_order: Literal["asc", "desc"] = Query("asc"),
):
    result = await SkillService(session).list_for_user(
        user.id,
        category_id=category_id,
        proficiency_level=proficiency_level.value if proficiency_level else None,
        min_years=min_years,
        is_featured=is_featured,
        search=params.search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=params.page,
        size=params.size,
    )
    return page_of(SkillRead, result)


@router.post("", response_model=SkillRead, status_code=201)
async def create_skill(
    body: SkillCreate, user: CurrentUser, session: DbSession, cache: Cache
):
    skill = await SkillService(session).create_skill(user.id, body.model_dump())
    await invalidate_owner(cache, session, user.id)
    return skill


@router.get("/grouped", response_model=list[SkillGroupRead])
async def grouped_skills(user: CurrentUser, session: DbSession):
    return await SkillService(session).grouped(user.id)


@router.get("/user/{user_id}/grouped", response_model=list[SkillGroupRead])
async def public_grouped_skills(user_id: str, session: DbSession):
    return await SkillService(session).grouped(user_id)


@router.post("/reorder", response_model=list[SkillRead])
async def reorder_skills(
    body: ReorderRequest, user: CurrentUser, session: DbSession, cache: Cache
):
    skills = await SkillService(session).reorder(user.id, body.ids)
    await invalidate_owner(cache, session, user.id)
    return skills


@router.get("/{skill_id}", response_model=SkillRead)
async def get_skill(skill_id: str, session: DbSession):
    return await SkillService(session).get(skill_id)


@router.patch("/{skill_id}", response_model=SkillRead)
async def update_skill(
    skill_id: str,
    body: SkillUpdate,
    user: CurrentUser,
    session: DbSession,
    cache: Cache,
):
    service = SkillService(session)
    skill = await service.get_owned(skill_id, user)
    skill = await service.update_skill(skill, body.model_dump(exclude_unset=True))
    await invalidate_owner(cache, session, skill.user_id)
    return skill


@router.post("/{skill_id}/endorse", response_model=SkillRead)
async def endorse_skill(
    skill_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = SkillService(session)
    skill = await service.endorse(await service.get(skill_id))
    await invalidate_owner(cache, session, skill.user_id)
    return skill


@router.delete("/{skill_id}", response_model=MessageResponse)
async def delete_skill(
    skill_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = SkillService(session)
    skill = await service.get_owned(skill_id, user)
    await service.soft_delete(skill)
    await invalidate_owner(cache, session, skill.user_id)
    return MessageResponse(message="Skill deleted successfully")


@router.post("/{skill_id}/restore", response_model=SkillRead)
async def restore_skill(
    skill_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = SkillService(session)
    service.ensure_owner(await service.get(skill_id, include_deleted=True), user)
    skill = await service.restore(skill_id)
    await invalidate_owner(cache, session, skill.user_id)
    return skill
