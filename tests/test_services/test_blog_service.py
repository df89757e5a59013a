"""Tests for blog posts, categories, tags, comments and contact submissions."""

from __future__ import annotations

import pytest

from portfolio_cms.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from portfolio_cms.services.blogs import (
    EXCERPT_LENGTH,
    BlogCategoryService,
    BlogCommentService,
    BlogService,
    BlogTagService,
    normalize_tags,
    reading_time,
)
from portfolio_cms.services.contacts import ContactService
from portfolio_cms.services.portfolios import PortfolioService


def _words(n: int) -> str:
    return " ".join(f"word{i}" for i in range(n))


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("words, minutes", [(0, 1), (1, 1), (200, 1), (201, 2), (401, 3)])
def test_reading_time(words, minutes):
    assert reading_time(_words(words)) == minutes


@pytest.mark.asyncio
async def test_slugs_are_unique(session, user, other_user):
    service = BlogService(session)
    first = await service.create_post(user.id, {"title": "Hello World", "content": "a"})
    second = await service.create_post(other_user.id, {"title": "Hello, World!", "content": "b"})
    third = await service.create_post(user.id, {"title": "x", "content": "c", "slug": "Hello World"})
    assert [first.slug, second.slug, third.slug] == [
        "hello-world",
        "hello-world-2",
        "hello-world-3",
    ]


@pytest.mark.asyncio
async def test_derived_fields(session, user):
    content = "<p>" + _words(450) + "</p>"
    blog = await BlogService(session).create_post(user.id, {"title": "Long", "content": content})
    assert blog.reading_time == 3
    assert blog.excerpt.startswith("word0 word1")
    assert len(blog.excerpt) <= EXCERPT_LENGTH
    assert "<p>" not in blog.excerpt
    assert blog.status == "draft"
    assert blog.published_at is None


@pytest.mark.asyncio
async def test_explicit_excerpt_kept(session, user):
    blog = await BlogService(session).create_post(
        user.id, {"title": "Short", "content": "body text", "excerpt": "Teaser"}
    )
    assert blog.excerpt == "Teaser"


@pytest.mark.asyncio
async def test_publishing_sets_published_at_once(session, user):
    service = BlogService(session)
    blog = await service.create_post(user.id, {"title": "Post", "content": "text"})
    blog = await service.update_post(blog, {"status": "published"})
    first = blog.published_at
    assert first is not None

    blog = await service.update_post(blog, {"status": "archived"})
    blog = await service.update_post(blog, {"status": "published"})
    assert blog.published_at == first


@pytest.mark.asyncio
async def test_content_change_regenerates_excerpt(session, user):
    service = BlogService(session)
    blog = await service.create_post(user.id, {"title": "Post", "content": "old words"})
    blog = await service.update_post(blog, {"content": "brand new words"})
    assert blog.excerpt == "brand new words"


@pytest.mark.asyncio
async def test_renaming_slug_skips_own_slug(session, user):
    service = BlogService(session)
    blog = await service.create_post(user.id, {"title": "Post", "content": "text"})
    same = await service.update_post(blog, {"slug": "Post"})
    assert same.slug == "post"
    renamed = await service.update_post(blog, {"slug": "Another Name"})
    assert renamed.slug == "another-name"


@pytest.mark.asyncio
async def test_list_posts_filters(session, user, other_user):
    service = BlogService(session)
    await service.create_post(
        user.id, {"title": "Async IO", "content": "x", "tags": ["python", "async"], "status": "published"}
    )
    await service.create_post(user.id, {"title": "Rust tips", "content": "y", "tags": ["rust"]})
    await service.create_post(other_user.id, {"title": "Python too", "content": "z", "tags": ["python"]})

    tagged = await service.list_posts(tag="python")
    assert tagged.total == 2

    mine = await service.list_posts(user_id=user.id, tag="python")
    assert [b.title for b in mine.items] == ["Async IO"]

    published = await service.list_posts(status="published")
    assert [b.title for b in published.items] == ["Async IO"]

    searched = await service.list_posts(search="rust")
    assert [b.title for b in searched.items] == ["Rust tips"]


@pytest.mark.asyncio
async def test_get_by_slug_counts_published_views(session, user):
    service = BlogService(session)
    await service.create_post(user.id, {"title": "Live", "content": "x", "status": "published"})
    await service.create_post(user.id, {"title": "Draft", "content": "y"})

    assert (await service.get_by_slug("live")).views_count == 1
    assert (await service.get_by_slug("live")).views_count == 2
    assert (await service.get_by_slug("live", count_view=False)).views_count == 2
    assert (await service.get_by_slug("draft")).views_count == 0
    with pytest.raises(NotFoundError):
        await service.get_by_slug("missing")


@pytest.mark.asyncio
async def test_like_and_unlike_never_negative(session, user):
    service = BlogService(session)
    blog = await service.create_post(user.id, {"title": "Post", "content": "x"})
    blog = await service.unlike(blog)
    assert blog.likes_count == 0
    blog = await service.like(blog)
    blog = await service.like(blog)
    blog = await service.unlike(blog)
    assert blog.likes_count == 1


@pytest.mark.asyncio
async def test_post_with_unknown_category(session, user):
    with pytest.raises(NotFoundError):
        await BlogService(session).create_post(
            user.id, {"title": "Post", "content": "x", "category_id": "missing"}
        )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_category_slug_generated_and_unique(session):
    service = BlogCategoryService(session)
    category = await service.create_category({"name": "Machine Learning"})
    assert category.slug == "machine-learning"
    with pytest.raises(ConflictError):
        await service.create_category({"name": "Machine learning"})


@pytest.mark.asyncio
async def test_category_update_rules(session):
    service = BlogCategoryService(session)
    parent = await service.create_category({"name": "Tech"})
    child = await service.create_category({"name": "Python", "parent_id": parent.id})
    assert child.parent_id == parent.id

    with pytest.raises(ConflictError):
        await service.update_category(child, {"slug": "tech"})
    with pytest.raises(ConflictError, match="own parent"):
        await service.update_category(child, {"parent_id": child.id})

    child = await service.update_category(child, {"slug": "Py Lang"})
    assert child.slug == "py-lang"


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_contact_submission_routes_to_owner(session, user):
    portfolio = await PortfolioService(session).create_for_user(user, {"name": "Mine"})
    service = ContactService(session)
    contact = await service.submit(
        portfolio.id,
        {"name": "Visitor", "email": "visitor@portfolio.dev", "message": "Hi there"},
    )
    assert contact.user_id == user.id
    assert contact.status == "new"

    with pytest.raises(NotFoundError):
        await service.submit("missing", {"name": "V", "email": "v@portfolio.dev", "message": "x"})


@pytest.mark.asyncio
async def test_contact_inbox_and_stats(session, user):
    await PortfolioService(session).create_for_user(user, {"name": "Mine"})
    service = ContactService(session)
    for name in ("Ann", "Ben", "Cat"):
        await service.submit(
            user.id, {"name": name, "email": f"{name.lower()}@portfolio.dev", "message": "Hello"}
        )
    inbox = await service.inbox(user.id)
    assert inbox.total == 3

    await service.set_status(inbox.items[0], "read")
    await service.set_status(inbox.items[1], "replied")
    stats = await service.stats(user.id)
    assert stats == {"new": 1, "read": 1, "replied": 1, "archived": 0, "total": 3}

    unread = await service.inbox(user.id, status="new")
    assert unread.total == 1
    assert (await service.inbox(user.id, search="ben")).total == 1


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------
def test_normalize_tags_dedupes_by_slug():
    assert normalize_tags(["  Python ", "python", "FastAPI", "!!!", "x" * 80]) == [
        "Python",
        "FastAPI",
        "x" * 50,
    ]
    assert normalize_tags(None) == []


@pytest.mark.asyncio
async def test_post_tags_create_tag_rows(session, user):
    blogs = BlogService(session)
    tags = BlogTagService(session)
    post = await blogs.create_post(
        user.id, {"title": "T", "content": "c", "tags": ["Python", " python ", "Async IO"]}
    )
    assert post.tags == ["Python", "Async IO"]
    assert [t.slug for t in (await tags.list()).items] == ["async-io", "python"]

    await blogs.update_post(post, {"tags": ["Python", "SQL"]})
    assert (await tags.get_by_slug("sql")).name == "SQL"
    assert (await tags.list()).total == 3


@pytest.mark.asyncio
async def test_tag_crud_and_delete_strips_posts(session, user):
    tags = BlogTagService(session)
    created = await tags.create_tag({"name": "Machine Learning", "color": "#ff0000"})
    assert created.slug == "machine-learning"
    with pytest.raises(ConflictError):
        await tags.create_tag({"name": "machine learning"})
    with pytest.raises(ValidationError):
        await tags.create_tag({"name": "???"})

    post = await BlogService(session).create_post(
        user.id, {"title": "T", "content": "c", "tags": ["Machine Learning", "Python"]}
    )
    await tags.delete_tag(created)
    await session.refresh(post)
    assert post.tags == ["Python"]
    with pytest.raises(NotFoundError):
        await tags.get_by_slug("machine-learning")

    # Reusing a deleted tag's name brings it back
    await BlogService(session).update_post(post, {"tags": ["Machine Learning"]})
    assert (await tags.get_by_slug("machine-learning")).id == created.id


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
async def _published(session, owner, **extra):
    return await BlogService(session).create_post(
        owner.id, {"title": "Post", "content": "body", "status": "published", **extra}
    )


@pytest.mark.asyncio
async def test_comments_follow_allow_comments(session, user, other_user):
    closed = await _published(session, user, allow_comments=False)
    with pytest.raises(ValidationError, match="disabled"):
        await BlogCommentService(session).create_comment(other_user, closed, "hi")


@pytest.mark.asyncio
async def test_comment_approval_and_threading(session, user, other_user):
    blog = await _published(session, user)
    comments = BlogCommentService(session)

    question = await comments.create_comment(other_user, blog, "Question?")
    answer = await comments.create_comment(user, blog, "Answer.", parent_id=question.id)
    follow_up = await comments.create_comment(other_user, blog, "Thanks", parent_id=answer.id)

    assert question.is_approved is False
    assert answer.is_approved is True
    # Replies to replies attach to the top-level comment
    assert follow_up.parent_id == question.id
    assert blog.comments_count == 3

    # Strangers see only approved comments, so the unapproved thread is hidden
    assert await comments.threads(blog) == []
    mine = await comments.threads(blog, other_user)
    assert [c.content for c in mine[0].replies] == ["Answer.", "Thanks"]
    owner_view = await comments.threads(blog, user)
    assert owner_view[0].comment.id == question.id

    await comments.update_comment(user, question, blog, {"is_approved": True})
    public = await comments.threads(blog)
    assert [c.content for c in public[0].replies] == ["Answer."]


@pytest.mark.asyncio
async def test_reply_must_share_the_post(session, user, other_user):
    comments = BlogCommentService(session)
    first = await _published(session, user)
    second = await _published(session, user, title="Other")
    parent = await comments.create_comment(user, first, "root")
    with pytest.raises(ValidationError, match="does not belong"):
        await comments.create_comment(other_user, second, "reply", parent_id=parent.id)


@pytest.mark.asyncio
async def test_comment_edit_moderate_delete_permissions(session, user, other_user, admin):
    blog = await _published(session, user)
    comments = BlogCommentService(session)
    comment = await comments.create_comment(other_user, blog, "Nice post")

    with pytest.raises(PermissionDeniedError):
        await comments.update_comment(user, comment, blog, {"content": "edited"})
    with pytest.raises(PermissionDeniedError):
        await comments.update_comment(other_user, comment, blog, {"is_approved": True})

    edited = await comments.update_comment(other_user, comment, blog, {"content": "Great post"})
    assert edited.content == "Great post"
    moderated = await comments.update_comment(admin, comment, blog, {"is_approved": True})
    assert moderated.is_approved is True

    outsider_blog = await _published(session, admin, title="Admin post")
    outsider = await comments.create_comment(user, outsider_blog, "hello")
    with pytest.raises(PermissionDeniedError):
        await comments.delete_comment(other_user, outsider, outsider_blog)

    # The post's author may remove comments left on it
    await comments.delete_comment(user, comment, blog)
    assert blog.comments_count == 0
    with pytest.raises(NotFoundError):
        await comments.get(comment.id)


@pytest.mark.asyncio
async def test_comment_likes_never_negative(session, user):
    blog = await _published(session, user)
    comments = BlogCommentService(session)
    comment = await comments.create_comment(user, blog, "mine")
    comment = await comments.unlike(comment)
    assert comment.likes_count == 0
    comment = await comments.like(comment)
    assert comment.likes_count == 1


# ---------------------------------------------------------------------------
# Engagement visibility
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_share_and_public_lookup(session, user, other_user):
    service = BlogService(session)
    live = await _published(session, user)
    draft = await service.create_post(user.id, {"title": "Draft", "content": "x"})
    private = await _published(session, user, title="Hidden", visibility="private")

    assert (await service.share(await service.get_public(live.id))).shares_count == 1
    for hidden in (draft, private):
        with pytest.raises(NotFoundError):
            await service.get_public(hidden.id)

    assert (await service.get_readable(draft.id, user)).id == draft.id
    with pytest.raises(NotFoundError):
        await service.get_readable(draft.id, other_user)
    with pytest.raises(NotFoundError):
        await service.get_readable(private.id, None)
