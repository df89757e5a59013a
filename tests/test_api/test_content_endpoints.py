"""HTTP-level tests for owner content, the public portfolio and engagement."""

from __future__ import annotations

import pytest
import pytest_asyncio
from slowapi import Limiter
from slowapi.util import get_remote_address

from portfolio_cms.core.config import settings

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user("alice", first_name="Alice")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_project_crud(api, make_user, auth_headers):
    user = await make_user("alice")
    headers = auth_headers(user)

    created = await api.post(
        "/projects",
        json={"title": "Dashboard", "technologies": ["python"], "status": "in_progress"},
        headers=headers,
    )
    assert created.status_code == 201
    project = created.json()
    assert project["user_id"] == user.id
    assert project["status"] == "in_progress"

    listing = await api.get("/projects", params={"search": "dash"}, headers=headers)
    assert listing.json()["total"] == 1
    assert listing.json()["data"][0]["id"] == project["id"]

    patched = await api.patch(
        f"/projects/{project['id']}", json={"featured": True}, headers=headers
    )
    assert patched.json()["featured"] is True
    assert patched.json()["title"] == "Dashboard"

    deleted = await api.delete(f"/projects/{project['id']}", headers=headers)
    assert deleted.json() == {"message": "Project deleted successfully"}
    assert (await api.get(f"/projects/{project['id']}")).status_code == 404

    restored = await api.post(f"/projects/{project['id']}/restore", headers=headers)
    assert restored.status_code == 200
    assert (await api.get("/projects", headers=headers)).json()["total"] == 1


@pytest.mark.asyncio
async def test_project_of_another_user_is_forbidden(api, make_user, auth_headers):
    owner = await make_user("alice")
    intruder = await make_user("bob")
    created = await api.post("/projects", json={"title": "Mine"}, headers=auth_headers(owner))
    project_id = created.json()["id"]

    resp = await api.patch(
        f"/projects/{project_id}", json={"title": "Stolen"}, headers=auth_headers(intruder)
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "PermissionDeniedError"

    resp = await api.delete(f"/projects/{project_id}", headers=auth_headers(intruder))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_invalid_enum_rejected(api, make_user, auth_headers):
    user = await make_user("alice")
    resp = await api.post(
        "/projects", json={"title": "X", "status": "abandoned"}, headers=auth_headers(user)
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_pagination_limits_enforced(api, make_user, auth_headers):
    user = await make_user("alice")
    resp = await api.get("/projects", params={"size": 500}, headers=auth_headers(user))
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Public portfolio
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_public_portfolio_by_username(api, alice, auth_headers):
    headers = auth_headers(alice)
    created = await api.post(
        "/portfolio",
        json={
            "name": "Alice builds things",
            "is_published": True,
            "social_links": [{"platform": "github", "url": "https://github.com/alice"}],
        },
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["id"] == alice.id

    await api.post("/projects", json={"title": "Compiler"}, headers=headers)
    await api.post("/skills", json={"name": "Python"}, headers=headers)

    resp = await api.get("/portfolio/public/alice")
    assert resp.status_code == 200
    body = resp.json()
    assert body["portfolio"]["name"] == "Alice builds things"
    assert body["owner"]["username"] == "alice"
    assert "email" not in body["owner"]
    assert [p["title"] for p in body["projects"]] == ["Compiler"]
    assert body["skill_groups"][0]["category"] is None
    assert body["social_links"][0]["platform"] == "github"

    published = await api.get("/portfolio/published")
    assert published.json()["total"] == 1


@pytest.mark.asyncio
async def test_unpublished_portfolio_is_not_public(api, alice, auth_headers):
    await api.post("/portfolio", json={"name": "Draft"}, headers=auth_headers(alice))
    resp = await api.get("/portfolio/public/alice")
    assert resp.status_code == 404
    assert resp.json()["status"] == "error"


@pytest.mark.asyncio
async def test_second_portfolio_conflicts(api, alice, auth_headers):
    headers = auth_headers(alice)
    await api.post("/portfolio", json={"name": "One"}, headers=headers)
    resp = await api.post("/portfolio", json={"name": "Two"}, headers=headers)
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Contact and analytics
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_contact_submission_reaches_owner_inbox(api, alice, auth_headers):
    headers = auth_headers(alice)
    await api.post("/portfolio", json={"name": "Mine", "is_published": True}, headers=headers)

    sent = await api.post(
        "/contact",
        json={
            "portfolio_id": alice.id,
            "name": "Recruiter",
            "email": "recruiter@portfolio.dev",
            "message": "Are you available?",
        },
    )
    assert sent.status_code == 201
    assert sent.json()["status"] == "new"

    inbox = await api.get("/contact", headers=headers)
    assert inbox.json()["total"] == 1

    contact_id = inbox.json()["data"][0]["id"]
    updated = await api.patch(
        f"/contact/{contact_id}/status", json={"status": "read"}, headers=headers
    )
    assert updated.json()["status"] == "read"

    stats = await api.get("/contact/stats", headers=headers)
    assert stats.json()["read"] == 1
    assert stats.json()["total"] == 1


@pytest.mark.asyncio
async def test_track_and_summary(api, alice, auth_headers, make_user):
    headers = auth_headers(alice)
    await api.post("/portfolio", json={"name": "Mine", "is_published": True}, headers=headers)

    tracked = await api.post(
        "/analytics/track",
        json={"portfolio_id": alice.id, "page_path": "/about", "scroll_depth": 60},
        headers={"User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) Firefox/120.0"},
    )
    assert tracked.status_code == 201
    assert tracked.json()["is_new_visitor"] is True

    summary = await api.get(
        f"/analytics/portfolio/{alice.id}", params={"period": "7d"}, headers=headers
    )
    assert summary.status_code == 200
    assert summary.json()["summary"]["total_views"] == 1
    assert summary.json()["browser_breakdown"] == {"Firefox": 1}

    stranger = await make_user("bob")
    denied = await api.get(f"/analytics/portfolio/{alice.id}", headers=auth_headers(stranger))
    assert denied.status_code == 403

    bad_period = await api.get(
        f"/analytics/portfolio/{alice.id}", params={"period": "1y"}, headers=headers
    )
    assert bad_period.status_code == 422


@pytest.mark.asyncio
async def test_analytics_reports_are_owner_only(api, alice, auth_headers, make_user):
    headers = auth_headers(alice)
    await api.post("/portfolio", json={"name": "Mine", "is_published": True}, headers=headers)
    for path in ("/", "/projects"):
        await api.post(
            "/analytics/track",
            json={
                "portfolio_id": alice.id,
                "page_path": path,
                "visitor_id": "v1",
                "referrer": "https://github.com/alice",
            },
        )
    base = f"/analytics/portfolio/{alice.id}"

    realtime = await api.get(f"{base}/realtime", headers=headers)
    assert realtime.status_code == 200
    assert realtime.json()["active_visitors"] == 1

    referrers = await api.get(f"{base}/referrers", params={"days": 7}, headers=headers)
    assert referrers.json()[0]["referrer_domain"] == "github.com"
    too_long = await api.get(f"{base}/referrers", params={"days": 400}, headers=headers)
    assert too_long.status_code == 422

    funnel = await api.get(f"{base}/funnel", params={"steps": "/,/projects"}, headers=headers)
    assert [s["visitors"] for s in funnel.json()] == [1, 1]
    blank = await api.get(f"{base}/funnel", params={"steps": ","}, headers=headers)
    assert blank.status_code == 400

    journey = await api.get(f"{base}/visitors/v1/journey", headers=headers)
    assert journey.status_code == 200
    assert [v["page_path"] for v in journey.json()["journey"]] == ["/", "/projects"]
    assert journey.json()["visitor"]["visit_count"] >= 1
    missing = await api.get(f"{base}/visitors/nobody/journey", headers=headers)
    assert missing.status_code == 404

    stranger = auth_headers(await make_user("bob"))
    for path in ("realtime", "referrers", "visitors/v1/journey"):
        assert (await api.get(f"{base}/{path}", headers=stranger)).status_code == 403


# ---------------------------------------------------------------------------
# Uploads and rate limits
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_oversized_upload_rejected(api, alice, auth_headers, upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 16)
    response = await api.post(
        "/images",
        files={"file": ("big.png", b"\x89PNG" + b"0" * 64, "image/png")},
        headers=auth_headers(alice),
    )
    assert response.status_code == 400
    assert "upload limit" in response.json()["message"]
    assert list(upload_dir.rglob("*.png")) == []


@pytest.mark.asyncio
async def test_default_limits_apply_to_undecorated_routes(api):
    from portfolio_cms.api.main import app

    original = app.state.limiter
    app.state.limiter = Limiter(
        key_func=get_remote_address, default_limits=["2/minute"], enabled=True
    )
    try:
        codes = [(await api.get("/portfolio/published")).status_code for _ in range(3)]
    finally:
        app.state.limiter = original
    assert codes == [200, 200, 429]
