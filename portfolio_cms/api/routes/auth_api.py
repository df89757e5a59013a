"""Authentication endpoints.

Provides:
- POST /auth/signup          -- Create an account and sign in
- POST /auth/login           -- Issue access + refresh tokens (also as cookies)
- POST /auth/refresh         -- Exchange the refresh token for a new pair
- POST /auth/logout          -- Clear auth cookies
- GET  /auth/me              -- Current user with role permissions
- GET  /auth/check-username  -- Username availability
- GET  /auth/profile         -- Current user's profile
- PUT  /auth/profile         -- Update the profile
- POST /auth/change-password -- Change password
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Query, Request, Response

from portfolio_cms.api.auth import (
    REFRESH_COOKIE,
    CurrentUser,
    clear_auth_cookies,
    set_auth_cookies,
)
from portfolio_cms.api.deps import Cache, DbSession, invalidate_owner
from portfolio_cms.api.limiter import AUTH_LIMIT, limiter
from portfolio_cms.api.schemas.common import MessageResponse
from portfolio_cms.api.schemas.users import (
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UsernameAvailability,
    UserRead,
)
from portfolio_cms.services.users import AuthService, TokenPair, UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _token_response(response: Response, tokens: TokenPair) -> TokenResponse:
    set_auth_cookies(response, tokens.access_token, tokens.refresh_token)
    return TokenResponse.model_validate(tokens)


# ---------------------------------------------------------------------------
# POST /auth/signup
# ---------------------------------------------------------------------------
@router.post("/signup", response_model=TokenResponse, status_code=201)
@limiter.limit(AUTH_LIMIT)
async def signup(
    request: Request, response: Response, body: RegisterRequest, session: DbSession
):
    """Register a new ``user`` account and return a signed-in token pair."""
    tokens = await AuthService(UserService(session)).register(body.model_dump())
    logger.info("New account registered: %s", tokens.user.username)
    return _token_response(response, tokens)


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------
@router.post("/login", response_model=TokenResponse)
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request, response: Response, body: LoginRequest, session: DbSession
):
    tokens = await AuthService(UserService(session)).login(body.email, body.password)
    return _token_response(response, tokens)


# ---------------------------------------------------------------------------
# POST /auth/refresh
# ---------------------------------------------------------------------------
@router.post("/refresh", response_model=TokenResponse)
@limiter.limit(AUTH_LIMIT)
async def refresh(
    request: Request,
    response: Response,
    session: DbSession,
    body: Optional[RefreshRequest] = Body(None),
):
    """Rotate tokens. The refresh token comes from the body or the cookie."""
    token = (body.refresh_token if body else None) or request.cookies.get(REFRESH_COOKIE)
    tokens = await AuthService(UserService(session)).refresh(token)
    return _token_response(response, tokens)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    clear_auth_cookies(response)
    return MessageResponse(message="Logged out successfully")


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------
@router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser):
    return MeResponse(
        user=UserRead.model_validate(user),
        is_authenticated=True,
        permissions=AuthService.permissions_for(user.role),
    )


@router.get("/check-username", response_model=UsernameAvailability)
@limiter.limit(AUTH_LIMIT)
async def check_username(
    request: Request,
    session: DbSession,
    username: str = Query(..., min_length=3, max_length=50),
):
    available = await UserService(session).username_available(username)
    return UsernameAvailability(username=username, available=available)


@router.get("/profile", response_model=UserRead)
async def get_profile(user: CurrentUser):
    return user


@router.put("/profile", response_model=UserRead)
async def update_profile(
    body: ProfileUpdate, user: CurrentUser, session: DbSession, cache: Cache
):
    previous_username = user.username
    updated = await UserService(session).update_profile(
        user, body.model_dump(exclude_unset=True)
    )
    if cache is not None and previous_username != updated.username:
        await cache.invalidate_user(user.id, previous_username)
    await invalidate_owner(cache, session, user.id)
    return updated


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest, user: CurrentUser, session: DbSession
):
    await AuthService(UserService(session)).change_password(
        user, body.current_password, body.new_password, body.confirm_password
    )
    return MessageResponse(message="Password changed successfully")
