"""Authentication and role-based access dependencies.

Provides:
- get_current_user(): resolves the Bearer token (or ``access_token`` cookie)
  to an active ``User``
- get_optional_user(): same, but anonymous requests yield ``None``
- require_role(): factory returning a dependency enforcing role membership
- set_auth_cookies() / clear_auth_cookies(): httpOnly token cookies
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from portfolio_cms.api.deps import DbSession
from portfolio_cms.core.config import settings
from portfolio_cms.core.enums import UserRole, UserStatus
from portfolio_cms.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
)
from portfolio_cms.core.models import User
from portfolio_cms.core.security import decode_token
from portfolio_cms.services.users import UserService

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"
ACCESS_COOKIE_MAX_AGE = 60 * 60
REFRESH_COOKIE_MAX_AGE = 24 * 60 * 60


def _extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(ACCESS_COOKIE)


# ---------------------------------------------------------------------------
# Current-user dependencies
# ---------------------------------------------------------------------------
async def get_current_user(
    request: Request,
    session: DbSession,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    token = _extract_token(request, credentials)
    if not token:
        raise AuthenticationError("Missing authentication token")
    payload = decode_token(token)
    try:
        user = await UserService(session).get(payload["sub"])
    except NotFoundError:
        raise AuthenticationError("User no longer exists")
    if user.status != UserStatus.ACTIVE.value:
        raise AuthenticationError("Account is not active")
    return user


async def get_optional_user(
    request: Request,
    session: DbSession,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[User]:
    if not _extract_token(request, credentials):
        return None
    try:
        return await get_current_user(request, session, credentials)
    except AuthenticationError:
        return None


# Typed aliases for use in route signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]


# ---------------------------------------------------------------------------
# Role-based access control dependency
# ---------------------------------------------------------------------------
def require_role(*allowed_roles: UserRole):
    """Factory that returns a FastAPI dependency enforcing role membership.

    Usage::

        @router.post("/plans", dependencies=[Depends(require_role(UserRole.ADMIN))])
        async def create_plan(...): ...
    """
    allowed = {r.value for r in allowed_roles}

    async def _check_role(user: CurrentUser) -> User:
        if user.role not in allowed:
            raise PermissionDeniedError(
                f"Insufficient permissions. Required: {', '.join(sorted(allowed))}. "
                f"Your role: {user.role}."
            )
        return user

    return _check_role


AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]


# ---------------------------------------------------------------------------
# Cookies
# ---------------------------------------------------------------------------
def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    common = {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": "lax",
        "path": "/",
    }
    response.set_cookie(
        REFRESH_COOKIE, refresh_token, max_age=REFRESH_COOKIE_MAX_AGE, **common
    )
    response.set_cookie(
        ACCESS_COOKIE, access_token, max_age=ACCESS_COOKIE_MAX_AGE, **common
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(REFRESH_COOKIE, path="/")
    response.delete_cookie(ACCESS_COOKIE, path="/")
