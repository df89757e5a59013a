"""Project endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from portfolio_cms.api.auth import CurrentUser
from portfolio_cms.api.deps import Cache, DbSession, Pagination, invalidate_owner
from portfolio_cms.api.schemas.common import (
    MessageResponse,
    Paginated,
    ReorderRequest,
    page_of,
)
from portfolio_cms.api.schemas.content import ProjectCreate, ProjectRead, ProjectUpdate
from portfolio_cms.core.enums import ProjectStatus
from portfolio_cms.services.projects import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=Paginated[ProjectRead])
async def list_projects(
    user: CurrentUser,
    session: DbSession,
    params: Pagination,
    category: Optional[str] = Query(None),
    status: Optional[ProjectStatus] = Query(None),
    featured: Optional[bool] = Query(None),
    portfolio_id: Optional[str] = Query(None),
):
    result = await ProjectService(session).list_for_user(
        user.id,
        category=category,
        status=status.value if status else None,
        featured=featured,
        portfolio_id=portfolio_id,
        search=params.search,
        page=params.page,
        size=params.size,
    )
    return page_of(ProjectRead, result)


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project(
    body: ProjectCreate, user: CurrentUser, session: DbSession, cache: Cache
):
    project = await ProjectService(session).create(body.model_dump(), user_id=user.id)
    await invalidate_owner(cache, session, user.id)
    return project


@router.get("/featured", response_model=list[ProjectRead])
async def featured_projects(
    user: CurrentUser, session: DbSession, limit: int = Query(6, ge=1, le=50)
):
    return await ProjectService(session).list_featured(user.id, limit)


@router.get("/categories", response_model=list[str])
async def project_categories(user: CurrentUser, session: DbSession):
    return await ProjectService(session).categories(user.id)


@router.get("/user/{user_id}", response_model=Paginated[ProjectRead])
async def public_projects(user_id: str, session: DbSession, params: Pagination):
    """Public listing of another user's projects."""
    result = await ProjectService(session).list_for_user(
        user_id, search=params.search, page=params.page, size=params.size
    )
    return page_of(ProjectRead, result)


@router.post("/reorder", response_model=list[ProjectRead])
async def reorder_projects(
    body: ReorderRequest, user: CurrentUser, session: DbSession, cache: Cache
):
    projects = await ProjectService(session).reorder(user.id, body.ids)
    await invalidate_owner(cache, session, user.id)
    return projects


# ---------------------------------------------------------------------------
# By id
# ---------------------------------------------------------------------------
@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project_id: str, session: DbSession):
    return await ProjectService(session).get(project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    user: CurrentUser,
    session: DbSession,
    cache: Cache,
):
    service = ProjectService(session)
    project = await service.get_owned(project_id, user)
    project = await service.update(project, body.model_dump(exclude_unset=True))
    await invalidate_owner(cache, session, project.user_id)
    return project


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = ProjectService(session)
    project = await service.get_owned(project_id, user)
    await service.soft_delete(project)
    await invalidate_owner(cache, session, project.user_id)
    return MessageResponse(message="Project deleted successfully")


@router.post("/{project_id}/restore", response_model=ProjectRead)
async def restore_project(
    project_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = ProjectService(session)
    service.ensure_owner(await service.get(project_id, include_deleted=True), user)
    project = await service.restore(project_id)
    await invalidate_owner(cache, session, project.user_id)
    return project


@router.delete("/{project_id}/permanent", response_model=MessageResponse)
async def permanently_delete_project(
    project_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = ProjectService(session)
    project = await service.get(project_id, include_deleted=True)
    service.ensure_owner(project, user)
    owner_id = project.user_id
    await service.permanent_delete(project)
    logger.info("Project %s permanently deleted by %s", project_id, user.id)
    await invalidate_owner(cache, session, owner_id)
    return MessageResponse(message="Project permanently deleted")
