"""Tests for UserService and AuthService."""

from __future__ import annotations

import pytest

from portfolio_cms.core.config import settings
from portfolio_cms.core.enums import UserStatus
from portfolio_cms.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ValidationError,
)
from portfolio_cms.core.security import decode_token, verify_password
from portfolio_cms.services.users import AuthService, UserService


def _auth(session) -> AuthService:
    return AuthService(UserService(session))


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_create_user_defaults(session, password):
    user = await UserService(session).create_user(
        {
            "username": "carol",
            "email": "  Carol@Portfolio.DEV ",
            "password": password,
            "first_name": "Carol",
            "last_name": "King",
        }
    )
    assert user.email == "carol@portfolio.dev"
    assert user.role == "user"
    assert user.status == "active"
    assert user.password_hash != password
    assert verify_password(password, user.password_hash)
    assert user.profile_completeness == 20


@pytest.mark.asyncio
async def test_duplicate_email_and_username_conflict(session, user, password):
    service = UserService(session)
    with pytest.raises(ConflictError, match="Email already registered"):
        await service.create_user(
            {"username": "someone", "email": "ALICE@portfolio.dev", "password": password}
        )
    with pytest.raises(ConflictError, match="Username already taken"):
        await service.create_user(
            {"username": "alice", "email": "new@portfolio.dev", "password": password}
        )


@pytest.mark.asyncio
async def test_lookup_by_email_is_case_insensitive(session, user):
    found = await UserService(session).get_by_email("Alice@Portfolio.dev")
    assert found is not None and found.id == user.id


@pytest.mark.asyncio
async def test_update_profile_recomputes_completeness(session, user):
    updated = await UserService(session).update_profile(
        user, {"bio": "Engineer", "location": "Lisbon", "website": "https://a.dev"}
    )
    assert updated.profile_completeness == 50


@pytest.mark.asyncio
async def test_update_profile_rejects_taken_username(session, user, other_user):
    with pytest.raises(ConflictError):
        await UserService(session).update_profile(user, {"username": "bob"})


@pytest.mark.asyncio
async def test_username_available(session, user):
    service = UserService(session)
    assert await service.username_available("alice") is False
    assert await service.username_available("zed") is True


@pytest.mark.asyncio
async def test_public_profile_hides_deleted_users(session, user):
    from portfolio_cms.core.exceptions import NotFoundError

    service = UserService(session)
    assert (await service.get_public_profile("alice")).id == user.id
    await service.soft_delete(user)
    with pytest.raises(NotFoundError):
        await service.get_public_profile("alice")


@pytest.mark.asyncio
async def test_deleted_user_listing_restore_and_erase(session, user, other_user, admin):
    from portfolio_cms.core.exceptions import NotFoundError

    service = UserService(session)
    await service.soft_delete(other_user)

    assert (await service.list()).total == 2
    assert (await service.list_deleted()).total == 3
    only = await service.list_deleted(only_deleted=True)
    assert [u.username for u in only.items] == ["bob"]

    restored = await service.restore(other_user.id)
    assert restored.deleted_at is None
    with pytest.raises(NotFoundError, match="not deleted"):
        await service.restore(other_user.id)

    await service.erase(other_user)
    with pytest.raises(NotFoundError):
        await service.get(other_user.id, include_deleted=True)

    with pytest.raises(ConflictError, match="last administrator"):
        await service.erase(admin)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_register_ignores_requested_role(session, password):
    tokens = await _auth(session).register(
        {
            "username": "mallory",
            "email": "mallory@portfolio.dev",
            "password": password,
            "role": "admin",
        }
    )
    assert tokens.user.role == "user"
    assert tokens.token_type == "Bearer"
    assert tokens.expires_in == settings.jwt_expiry_minutes * 60
    assert decode_token(tokens.access_token)["sub"] == tokens.user.id


@pytest.mark.asyncio
async def test_login_success_records_last_login(session, user, password):
    assert user.last_login_at is None
    tokens = await _auth(session).login("alice@portfolio.dev", password)
    assert tokens.user.id == user.id
    assert tokens.user.last_login_at is not None
    assert decode_token(tokens.access_token)["username"] == "alice"


@pytest.mark.asyncio
async def test_login_wrong_password(session, user):
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        await _auth(session).login("alice@portfolio.dev", "nope-nope")


@pytest.mark.asyncio
async def test_login_unknown_email(session):
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        await _auth(session).login("ghost@portfolio.dev", "whatever")


@pytest.mark.asyncio
async def test_login_inactive_account(session, user, password):
    await UserService(session).set_status(user, UserStatus.SUSPENDED)
    with pytest.raises(AuthenticationError, match="Account is not active"):
        await _auth(session).login("alice@portfolio.dev", password)


@pytest.mark.asyncio
async def test_refresh_issues_new_pair(session, user):
    auth = _auth(session)
    first = auth.issue_tokens(user)
    refreshed = await auth.refresh(first.refresh_token)
    assert refreshed.user.id == user.id
    assert decode_token(refreshed.access_token)["sub"] == user.id


@pytest.mark.asyncio
async def test_refresh_rejects_missing_and_access_tokens(session, user):
    auth = _auth(session)
    with pytest.raises(AuthenticationError, match="Refresh token missing"):
        await auth.refresh(None)
    with pytest.raises(AuthenticationError):
        await auth.refresh(auth.issue_tokens(user).access_token)


@pytest.mark.asyncio
async def test_change_password(session, user, password):
    auth = _auth(session)
    with pytest.raises(AuthenticationError, match="Current password is incorrect"):
        await auth.change_password(user, "wrong-one", "NewPass123!", "NewPass123!")
    with pytest.raises(ValidationError, match="do not match"):
        await auth.change_password(user, password, "NewPass123!", "Different123!")

    await auth.change_password(user, password, "NewPass123!", "NewPass123!")
    tokens = await auth.login("alice@portfolio.dev", "NewPass123!")
    assert tokens.user.id == user.id


def test_permissions_for_roles():
    assert "manage:users" in AuthService.permissions_for("admin")
    assert "write:own" in AuthService.permissions_for("user")
    assert AuthService.permissions_for("unknown") == ["read:public"]
