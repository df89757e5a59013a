"""HTTP-level tests for blog engagement, comments and tags."""

from __future__ import annotations

import pytest
import pytest_asyncio

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def author(make_user):
    return await make_user("alice")


@pytest_asyncio.fixture
async def reader(make_user):
    return await make_user("bob")


async def _post(api, headers, **extra) -> dict:
    body = {"title": "Launch notes", "content": "hello world", "status": "published", **extra}
    response = await api.post("/blogs", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()


# ---------------------------------------------------------------------------
# Likes and shares
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_like_requires_login(api, author, auth_headers):
    blog = await _post(api, auth_headers(author))
    assert (await api.post(f"/blogs/{blog['id']}/like")).status_code == 401
    assert (await api.post(f"/blogs/{blog['id']}/unlike")).status_code == 401


@pytest.mark.asyncio
async def test_like_and_unlike_published_post(api, author, reader, auth_headers):
    blog = await _post(api, auth_headers(author))
    headers = auth_headers(reader)

    liked = await api.post(f"/blogs/{blog['id']}/like", headers=headers)
    assert liked.status_code == 200
    assert liked.json()["likes_count"] == 1

    unliked = await api.post(f"/blogs/{blog['id']}/unlike", headers=headers)
    assert unliked.json()["likes_count"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "extra",
    [{"status": "draft"}, {"visibility": "private"}, {"visibility": "password_protected"}],
)
async def test_engagement_hidden_posts_are_missing(api, author, reader, auth_headers, extra):
    blog = await _post(api, auth_headers(author), **extra)
    headers = auth_headers(reader)
    assert (await api.post(f"/blogs/{blog['id']}/like", headers=headers)).status_code == 404
    assert (await api.post(f"/blogs/{blog['id']}/share")).status_code == 404


@pytest.mark.asyncio
async def test_share_is_anonymous(api, author, auth_headers):
    blog = await _post(api, auth_headers(author))
    shared = await api.post(f"/blogs/{blog['id']}/share")
    assert shared.status_code == 200
    assert shared.json()["shares_count"] == 1


@pytest.mark.asyncio
async def test_slug_view_not_counted_for_hidden_post(api, author, auth_headers):
    headers = auth_headers(author)
    blog = await _post(api, headers, visibility="private")
    assert (await api.get(f"/blogs/slug/{blog['slug']}")).status_code == 404
    own = await api.get(f"/blogs/slug/{blog['slug']}", headers=headers)
    assert own.json()["views_count"] == 1


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_comment_flow(api, author, reader, auth_headers):
    owner_headers = auth_headers(author)
    reader_headers = auth_headers(reader)
    blog = await _post(api, owner_headers)
    url = f"/blogs/{blog['id']}/comments"

    assert (await api.post(url, json={"content": "hi"})).status_code == 401
    created = await api.post(url, json={"content": "Great read"}, headers=reader_headers)
    assert created.status_code == 201
    comment = created.json()
    assert comment["is_approved"] is False

    # Pending comments are hidden from anonymous readers
    assert (await api.get(url)).json() == []
    assert (await api.get(f"/blogs/comments/{comment['id']}")).status_code == 404
    pending_like = await api.post(
        f"/blogs/comments/{comment['id']}/like", headers=reader_headers
    )
    assert pending_like.status_code == 404

    denied = await api.patch(
        f"/blogs/comments/{comment['id']}", json={"is_approved": True}, headers=reader_headers
    )
    assert denied.status_code == 403
    approved = await api.patch(
        f"/blogs/comments/{comment['id']}", json={"is_approved": True}, headers=owner_headers
    )
    assert approved.json()["is_approved"] is True

    reply = await api.post(
        url, json={"content": "Thanks!", "parent_id": comment["id"]}, headers=owner_headers
    )
    assert reply.json()["is_approved"] is True

    threads = (await api.get(url)).json()
    assert [t["content"] for t in threads] == ["Great read"]
    assert [r["content"] for r in threads[0]["replies"]] == ["Thanks!"]

    liked = await api.post(f"/blogs/comments/{comment['id']}/like", headers=reader_headers)
    assert liked.json()["likes_count"] == 1

    post = await api.get(f"/blogs/{blog['id']}", headers=owner_headers)
    assert post.json()["comments_count"] == 2
    removed = await api.delete(f"/blogs/comments/{reply.json()['id']}", headers=owner_headers)
    assert removed.status_code == 200


@pytest.mark.asyncio
async def test_comments_closed_or_hidden(api, author, reader, auth_headers):
    owner_headers = auth_headers(author)
    closed = await _post(api, owner_headers, allow_comments=False)
    rejected = await api.post(
        f"/blogs/{closed['id']}/comments", json={"content": "hi"}, headers=auth_headers(reader)
    )
    assert rejected.status_code == 400

    draft = await _post(api, owner_headers, title="Draft", status="draft")
    hidden = await api.post(
        f"/blogs/{draft['id']}/comments", json={"content": "hi"}, headers=auth_headers(reader)
    )
    assert hidden.status_code == 404


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_tag_admin_and_public_reads(api, author, make_user, auth_headers):
    admin_headers = auth_headers(await make_user("root", role="admin"))
    await _post(api, auth_headers(author), tags=["Python", "FastAPI"])

    listed = await api.get("/blogs/tags")
    assert [t["slug"] for t in listed.json()] == ["fastapi", "python"]
    assert (await api.get("/blogs/tags/slug/python")).json()["name"] == "Python"

    payload = {"name": "Data Science", "color": "#00ff00"}
    assert (await api.post("/blogs/tags", json=payload, headers=auth_headers(author))).status_code == 403
    created = await api.post("/blogs/tags", json=payload, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["slug"] == "data-science"
    duplicate = await api.post("/blogs/tags", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409

    tag_id = created.json()["id"]
    renamed = await api.patch(
        f"/blogs/tags/{tag_id}", json={"description": "Numbers"}, headers=admin_headers
    )
    assert renamed.json()["description"] == "Numbers"
    assert (await api.delete(f"/blogs/tags/{tag_id}", headers=admin_headers)).status_code == 200
    assert (await api.get("/blogs/tags/slug/data-science")).status_code == 404
