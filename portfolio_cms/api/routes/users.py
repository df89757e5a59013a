"""User administration and public profile endpoints."""

import logging

from fastapi import APIRouter

from portfolio_cms.api.auth import AdminUser
from portfolio_cms.api.deps import Cache, DbSession, Pagination, invalidate_owner
from portfolio_cms.api.schemas.common import MessageResponse, Paginated, page_of
from portfolio_cms.api.schemas.users import PublicUserRead, UserRead, UserStatusUpdate
from portfolio_cms.core.enums import UserStatus
from portfolio_cms.core.exceptions import ValidationError
from portfolio_cms.services.users import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=Paginated[UserRead])
async def list_users(admin: AdminUser, session: DbSession, params: Pagination):
    result = await UserService(session).list(
        search=params.search, page=params.page, size=params.size
    )
    return page_of(UserRead, result)


@router.get("/with-deleted", response_model=Paginated[UserRead])
async def list_users_with_deleted(admin: AdminUser, session: DbSession, params: Pagination):
    result = await UserService(session).list_deleted(
        search=params.search, page=params.page, size=params.size
    )
    return page_of(UserRead, result)


@router.get("/only-deleted", response_model=Paginated[UserRead])
async def list_deleted_users(admin: AdminUser, session: DbSession, params: Pagination):
    result = await UserService(session).list_deleted(
        only_deleted=True, search=params.search, page=params.page, size=params.size
    )
    return page_of(UserRead, result)


@router.get("/profile/{username}", response_model=PublicUserRead)
async def public_profile(username: str, session: DbSession):
    return await UserService(session).get_public_profile(username)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: str, admin: AdminUser, session: DbSession):
    return await UserService(session).get(user_id)


@router.patch("/{user_id}/status", response_model=UserRead)
async def set_user_status(
    user_id: str,
    body: UserStatusUpdate,
    admin: AdminUser,
    session: DbSession,
    cache: Cache,
):
    if user_id == admin.id:
        raise ValidationError("Administrators cannot change their own status")
    service = UserService(session)
    user = await service.set_status(await service.get(user_id), UserStatus(body.status))
    logger.info("User %s status set to %s by %s", user.id, user.status, admin.id)
    await invalidate_owner(cache, session, user.id)
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, admin: AdminUser, session: DbSession, cache: Cache):
    service = UserService(session)
    await service.soft_delete(await service.get(user_id))
    await invalidate_owner(cache, session, user_id)
    return MessageResponse(message="User deleted successfully")


@router.post("/{user_id}/restore", response_model=UserRead)
async def restore_user(user_id: str, admin: AdminUser, session: DbSession, cache: Cache):
    user = await UserService(session).restore(user_id)
    logger.info("User %s restored by %s", user_id, admin.id)
    await invalidate_owner(cache, session, user_id)
    return user


@router.delete("/{user_id}/permanent", response_model=MessageResponse)
async def permanently_delete_user(
    user_id: str, admin: AdminUser, session: DbSession, cache: Cache
):
    if user_id == admin.id:
        raise ValidationError("Administrators cannot delete their own account")
    service = UserService(session)
    await service.erase(await service.get(user_id, include_deleted=True))
    logger.info("User %s permanently deleted by %s", user_id, admin.id)
    await invalidate_owner(cache, session, user_id)
    return MessageResponse(message="User permanently deleted")
