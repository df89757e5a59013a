"""HTTP-level tests for /auth endpoints and the error envelope."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

SIGNUP = {
    "username": "carol",
    "email": "carol@portfolio.dev",
    "password": "Sup3rSecret!",
    "first_name": "Carol",
}


@pytest.mark.asyncio
async def test_health_is_served_at_root(api):
    resp = await api.get("http://testserver/health")
    assert resp.status_code == 200
    assert resp.json()["database"] == "connected"


@pytest.mark.asyncio
async def test_signup_returns_tokens_and_cookies(api):
    resp = await api.post("/auth/signup", json={**SIGNUP, "role": "admin"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["token_type"] == "Bearer"
    assert body["expires_in"] > 0
    assert body["user"]["username"] == "carol"
    assert body["user"]["role"] == "user"
    assert "password_hash" not in body["user"]
    cookies = resp.headers.get_list("set-cookie")
    assert any(c.startswith("refresh_token=") and "HttpOnly" in c for c in cookies)
    assert any(c.startswith("access_token=") for c in cookies)


@pytest.mark.asyncio
async def test_signup_duplicate_is_conflict(api, make_user):
    await make_user("carol")
    resp = await api.post("/auth/signup", json=SIGNUP)
    assert resp.status_code == 409
    assert resp.json() == {
        "status": "error",
        "status_code": 409,
        "message": "Email already registered",
        "error": "ConflictError",
    }


@pytest.mark.asyncio
async def test_signup_validation_envelope(api):
    resp = await api.post("/auth/signup", json={**SIGNUP, "email": "not-an-email", "password": "x"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["status"] == "error"
    assert body["error"] == "ValidationError"
    assert {d["field"] for d in body["details"]} == {"email", "password"}


@pytest.mark.asyncio
async def test_login_and_me(api, make_user, password):
    await make_user("alice")
    resp = await api.post("/auth/login", json={"email": "alice@portfolio.dev", "password": password})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = await api.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    body = me.json()
    assert body["user"]["username"] == "alice"
    assert body["user"]["last_login_at"] is not None
    assert "write:own" in body["permissions"]


@pytest.mark.asyncio
async def test_login_bad_password(api, make_user):
    await make_user("alice")
    resp = await api.post("/auth/login", json={"email": "alice@portfolio.dev", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_requires_token(api):
    resp = await api.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json()["error"] == "AuthenticationError"


@pytest.mark.asyncio
async def test_refresh_with_body_token(api, make_user, password):
    await make_user("alice")
    login = await api.post("/auth/login", json={"email": "alice@portfolio.dev", "password": password})
    refresh_token = login.json()["refresh_token"]

    resp = await api.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 200
    assert resp.json()["user"]["username"] == "alice"

    bad = await api.post("/auth/refresh", json={"refresh_token": login.json()["access_token"]})
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_check_username_and_profile_update(api, make_user, auth_headers):
    user = await make_user("alice")
    taken = await api.get("/auth/check-username", params={"username": "alice"})
    assert taken.json() == {"username": "alice", "available": False}

    resp = await api.put(
        "/auth/profile", json={"bio": "Hello", "location": "Porto"}, headers=auth_headers(user)
    )
    assert resp.status_code == 200
    assert resp.json()["bio"] == "Hello"
    assert resp.json()["profile_completeness"] == 20


@pytest.mark.asyncio
async def test_change_password(api, make_user, auth_headers, password):
    user = await make_user("alice")
    resp = await api.post(
        "/auth/change-password",
        json={
            "current_password": password,
            "new_password": "An0ther-Secret",
            "confirm_password": "An0ther-Secret",
        },
        headers=auth_headers(user),
    )
    assert resp.status_code == 200
    login = await api.post(
        "/auth/login", json={"email": "alice@portfolio.dev", "password": "An0ther-Secret"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_user_admin_routes_need_admin(api, make_user, auth_headers):
    user = await make_user("alice")
    admin = await make_user("root", role="admin")
    assert (await api.get("/users", headers=auth_headers(user))).status_code == 403
    listing = await api.get("/users", headers=auth_headers(admin))
    assert listing.status_code == 200
    assert listing.json()["total"] == 2


@pytest.mark.asyncio
async def test_admin_recovers_and_erases_users(api, make_user, auth_headers):
    user = await make_user("alice")
    admin = await make_user("root", role="admin")
    headers = auth_headers(admin)

    assert (await api.delete(f"/users/{user.id}", headers=headers)).status_code == 200
    assert (await api.get("/users", headers=headers)).json()["total"] == 1
    assert (await api.get("/users/with-deleted", headers=headers)).json()["total"] == 2
    deleted = await api.get("/users/only-deleted", headers=headers)
    assert [u["username"] for u in deleted.json()["data"]] == ["alice"]
    assert (await api.get("/users/only-deleted", headers=auth_headers(user))).status_code in (401, 403)

    restored = await api.post(f"/users/{user.id}/restore", headers=headers)
    assert restored.status_code == 200
    assert restored.json()["username"] == "alice"
    again = await api.post(f"/users/{user.id}/restore", headers=headers)
    assert again.status_code == 404

    own = await api.delete(f"/users/{admin.id}/permanent", headers=headers)
    assert own.status_code == 400
    erased = await api.delete(f"/users/{user.id}/permanent", headers=headers)
    assert erased.status_code == 200
    assert (await api.get("/users/with-deleted", headers=headers)).json()["total"] == 1
