"""User accounts and authentication flows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, select

from portfolio_cms.core.config import settings
from portfolio_cms.core.enums import UserRole, UserStatus
from portfolio_cms.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from portfolio_cms.core.models.users import User
from portfolio_cms.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, BaseService, Page

# Role -> permission strings returned by /auth/me
ROLE_PERMISSIONS: dict[str, list[str]] = {
    UserRole.ADMIN.value: [
        "read:all",
        "write:all",
        "delete:all",
        "manage:users",
        "manage:plans",
    ],
    UserRole.USER.value: [
        "read:own",
        "write:own",
        "delete:own",
        "read:public",
    ],
    UserRole.GUEST.value: ["read:public"],
}


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str
    user: User
    token_type: str = "Bearer"

    @property
    def expires_in(self) -> int:
        return settings.jwt_expiry_minutes * 60


class UserService(BaseService[User]):
    model = User
    label = "User"
    search_fields = ("username", "email", "first_name", "last_name")

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = self.base_query().where(func.lower(User.email) == email.strip().lower())
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        stmt = self.base_query(include_deleted=True).where(User.username == username)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get_public_profile(self, username: str) -> User:
        user = await self.get_by_username(username)
        if user is None or user.deleted_at is not None:
            raise NotFoundError(f"User {username} not found")
        return user

    async def create_user(self, data: dict[str, Any]) -> User:
        data = dict(data)
        password = data.pop("password")
        data.pop("confirm_password", None)
        role = data.pop("role", None) or UserRole.USER.value
        data["email"] = data["email"].strip().lower()

        # Uniqueness covers soft-deleted rows because the columns are unique
        existing = await self.session.execute(
            select(User.email, User.username).where(
                (func.lower(User.email) == data["email"])
                | (User.username == data["username"])
            )
        )
        for email, username in existing:
            if email.lower() == data["email"]:
                raise ConflictError("Email already registered")
            if username == data["username"]:
                raise ConflictError("Username already taken")

        user = User(
            **data,
            password_hash=hash_password(password),
            role=role,
            status=UserStatus.ACTIVE.value,
        )
        user.profile_completeness = user.compute_profile_completeness()
        user = await self.save(user)
        self.log.info("user_created", user_id=user.id, username=user.username)
        return user

    async def update_profile(self, user: User, data: dict[str, Any]) -> User:
        if "username" in data and data["username"] != user.username:
            if await self.get_by_username(data["username"]) is not None:
                raise ConflictError("Username already taken")
        for key, value in data.items():
            setattr(user, key, value)
        user.profile_completeness = user.compute_profile_completeness()
        return await self.save(user)

    async def touch_login(self, user: User) -> User:
        user.last_login_at = datetime.now(timezone.utc)
        return await self.save(user)

    async def set_status(self, user: User, status: UserStatus) -> User:
        user.status = status.value
        return await self.save(user)

    async def username_available(self, username: str) -> bool:
        return await self.get_by_username(username) is None

    async def list_deleted(
        self,
        only_deleted: bool = False,
        search: Optional[str] = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[User]:
        """Accounts including soft-deleted ones, or only those when *only_deleted*."""
        stmt = self.base_query(include_deleted=True)
        if only_deleted:
            stmt = stmt.where(User.deleted_at.is_not(None))
        return await self.paginate(self.apply_search(stmt, search), page, size)

    async def erase(self, user: User) -> None:
        """Remove the account row; owned content goes with it through FK cascades."""
        if user.role == UserRole.ADMIN.value:
            remaining = await self.session.execute(
                select(func.count()).where(
                    User.role == UserRole.ADMIN.value,
                    User.deleted_at.is_(None),
                    User.id != user.id,
                )
            )
            if remaining.scalar_one() == 0:
                raise ConflictError("Cannot permanently delete the last administrator")
        await self.permanent_delete(user)


class AuthService:
    """Registration, login, token refresh and password changes."""

    def __init__(self, users: UserService) -> None:
        self.users = users
        self.log = users.log.bind(component="auth")

    def issue_tokens(self, user: User) -> TokenPair:
        access = create_access_token(
            subject=user.id, role=user.role, extra={"username": user.username}
        )
        refresh = create_refresh_token(subject=user.id)
        return TokenPair(access_token=access, refresh_token=refresh, user=user)

    async def register(self, data: dict[str, Any]) -> TokenPair:
        data = {k: v for k, v in data.items() if k != "role"}
        user = await self.users.create_user(data)
        return self.issue_tokens(user)

    async def login(self, email: str, password: str) -> TokenPair:
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            self.log.warning("login_failed", email=email)
            raise AuthenticationError("Invalid credentials")
        if user.status != UserStatus.ACTIVE.value:
            raise AuthenticationError("Account is not active")

        user = await self.users.touch_login(user)
        self.log.info("login_succeeded", user_id=user.id)
        return self.issue_tokens(user)

    async def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        if not refresh_token:
            raise AuthenticationError("Refresh token missing")
        payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        try:
            user = await self.users.get(payload["sub"])
        except NotFoundError:
            raise AuthenticationError("User no longer exists")
        if user.status != UserStatus.ACTIVE.value:
            raise AuthenticationError("Account is not active")
        return self.issue_tokens(user)

    async def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        if new_password != confirm_password:
            raise ValidationError("New password and confirmation do not match")
        if new_password == current_password:
            raise ValidationError("New password must differ from the current one")
        user.password_hash = hash_password(new_password)
        await self.users.save(user)
        self.log.info("password_changed", user_id=user.id)

    @staticmethod
    def permissions_for(role: str) -> list[str]:
        return ROLE_PERMISSIONS.get(role, ROLE_PERMISSIONS[UserRole.GUEST.value])
