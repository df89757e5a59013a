"""Request/response schemas for authentication and user profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from portfolio_cms.api.schemas.common import ORMModel, Schema
from portfolio_cms.core.enums import UserRole, UserStatus

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


# =====================================================================
# REQUEST MODELS
# =====================================================================
class RegisterRequest(Schema):
    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class LoginRequest(Schema):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(Schema):
    """Body for POST /auth/refresh. The cookie is used when absent."""

    refresh_token: Optional[str] = None
    s_id: Optional[str] = None


class ChangePasswordRequest(Schema):
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str


class ProfileUpdate(Schema):
    username: Optional[str] = Field(
        None, min_length=3, max_length=50, pattern=USERNAME_PATTERN
    )
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    location: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=500)
    linkedin_url: Optional[str] = Field(None, max_length=500)
    github_url: Optional[str] = Field(None, max_length=500)
    twitter_url: Optional[str] = Field(None, max_length=500)


class UserStatusUpdate(Schema):
    status: UserStatus


# =====================================================================
# RESPONSE MODELS
# =====================================================================
class PublicUserRead(ORMModel):
    id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    twitter_url: Optional[str] = None


class UserRead(PublicUserRead):
    email: str
    phone: Optional[str] = None
    role: UserRole
    status: UserStatus
    is_email_verified: bool
    profile_completeness: int
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TokenResponse(ORMModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserRead


class MeResponse(ORMModel):
    user: UserRead
    is_authenticated: bool = True
    permissions: list[str]


class UsernameAvailability(ORMModel):
    username: str
    available: bool
