"""Blog posts, categories, tags and threaded comments."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select

from portfolio_cms.core.enums import BlogStatus, BlogVisibility, UserRole
from portfolio_cms.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from portfolio_cms.core.models import Blog, BlogCategory, BlogComment, BlogTag, User
from portfolio_cms.core.utils.text import slugify, strip_html, truncate, word_count
from portfolio_cms.services.base import (
    DEFAULT_PAGE_SIZE,
    BaseService,
    Page,
    clamp_pagination,
)

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 160
TAG_NAME_LENGTH = 50


def reading_time(content: str) -> int:
    return max(1, math.ceil(word_count(content) / WORDS_PER_MINUTE))


def normalize_tags(names: list[str] | None) -> list[str]:
    """Trimmed tag names, first spelling kept per slug, empty ones dropped."""
    seen: set[str] = set()
    cleaned = []
    for name in names or []:
        name = name.strip()[:TAG_NAME_LENGTH]
        slug = slugify(name)
        if slug and slug not in seen:
            seen.add(slug)
            cleaned.append(name)
    return cleaned


def is_public_post(blog: Blog) -> bool:
    return (
        blog.status == BlogStatus.PUBLISHED.value
        and blog.visibility == BlogVisibility.PUBLIC.value
    )


def can_read_post(blog: Blog, user: Optional[User]) -> bool:
    if is_public_post(blog):
        return True
    return user is not None and (
        user.id == blog.user_id or user.role == UserRole.ADMIN.value
    )


class BlogCategoryService(BaseService[BlogCategory]):
    model = BlogCategory
    label = "Blog category"
    search_fields = ("name", "description")

    def default_order(self) -> list[Any]:
        return [BlogCategory.display_order, BlogCategory.name]

    async def create_category(self, data: dict[str, Any]) -> BlogCategory:
        data = dict(data)
        data["slug"] = slugify(data.get("slug") or data["name"])
        await self._ensure_slug_free(data["slug"])
        if data.get("parent_id"):
            await self.get(data["parent_id"])
        return await self.create(data)

    async def update_category(
        self, category: BlogCategory, data: dict[str, Any]
    ) -> BlogCategory:
        data = dict(data)
        if data.get("slug"):
            data["slug"] = slugify(data["slug"])
            if data["slug"] != category.slug:
                await self._ensure_slug_free(data["slug"])
        if data.get("parent_id") == category.id:
            raise ConflictError("A category cannot be its own parent")
        return await self.update(category, data)

    async def _ensure_slug_free(self, slug: str) -> None:
        existing = await self.session.execute(
            select(BlogCategory.id).where(BlogCategory.slug == slug)
        )
        if existing.first() is not None:
            raise ConflictError(f"Blog category slug '{slug}' already exists")


class BlogService(BaseService[Blog]):
    model = Blog
    label = "Blog post"
    search_fields = ("title", "content", "excerpt")

    def default_order(self) -> list[Any]:
        return [Blog.published_at.desc(), Blog.created_at.desc()]

    async def unique_slug(self, title: str, exclude_id: Optional[str] = None) -> str:
        base = slugify(title) or "post"
        stmt = select(Blog.slug).where(Blog.slug.like(f"{base}%"))
        if exclude_id:
            stmt = stmt.where(Blog.id != exclude_id)
        taken = set((await self.session.execute(stmt)).scalars().all())
        if base not in taken:
            return base
        suffix = 2
        while f"{base}-{suffix}" in taken:
            suffix += 1
        return f"{base}-{suffix}"

    def _derive_fields(self, blog: Blog) -> None:
        blog.reading_time = reading_time(blog.content)
        if not blog.excerpt:
            blog.excerpt = truncate(strip_html(blog.content), EXCERPT_LENGTH)
        if blog.status == BlogStatus.PUBLISHED.value and blog.published_at is None:
            blog.published_at = datetime.now(timezone.utc)

    async def _check_category(self, category_id: Optional[str]) -> None:
        if category_id:
            await BlogCategoryService(self.session).get(category_id)

    async def create_post(self, user_id: str, data: dict[str, Any]) -> Blog:
        data = dict(data)
        await self._check_category(data.get("category_id"))
        requested = data.pop("slug", None)
        data["tags"] = await BlogTagService(self.session).ensure_tags(data.get("tags"))
        blog = Blog(**data, user_id=user_id)
        blog.slug = await self.unique_slug(requested or data["title"])
        self._derive_fields(blog)
        blog = await self.save(blog)
        self.log.info("blog_created", blog_id=blog.id, slug=blog.slug)
        return blog

    async def update_post(self, blog: Blog, data: dict[str, Any]) -> Blog:
        data = dict(data)
        if "category_id" in data:
            await self._check_category(data["category_id"])
        requested = data.pop("slug", None)
        if "tags" in data:
            data["tags"] = await BlogTagService(self.session).ensure_tags(data["tags"])
        for key, value in data.items():
            setattr(blog, key, value)
        if requested and slugify(requested) != blog.slug:
            blog.slug = await self.unique_slug(requested, exclude_id=blog.id)
        if "content" in data and "excerpt" not in data:
            blog.excerpt = None
        self._derive_fields(blog)
        return await self.save(blog)

    async def list_posts(
        self,
        *,
        user_id: str | None = None,
        status: str | None = None,
        category_id: str | None = None,
        tag: str | None = None,
        is_featured: bool | None = None,
        visibility: str | None = None,
        search: str | None = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Blog]:
        stmt = self.apply_search(
            self.apply_filters(
                self.base_query(),
                {
                    "user_id": user_id,
                    "status": status,
                    "category_id": category_id,
                    "is_featured": is_featured,
                    "visibility": visibility,
                },
            ),
            search,
        )
        if not tag:
            return await self.paginate(stmt, page, size)
        # Tag membership on the JSON column is checked in Python
        rows = await self.session.execute(stmt.order_by(*self.default_order()))
        matches = [b for b in rows.scalars().all() if tag in (b.tags or [])]
        page, size = clamp_pagination(page, size)
        start = (page - 1) * size
        return Page(items=matches[start : start + size], total=len(matches))

    async def get_by_slug(self, slug: str, count_view: bool = True) -> Blog:
        stmt = self.base_query().where(Blog.slug == slug)
        blog = (await self.session.execute(stmt)).scalar_one_or_none()
        if blog is None:
            raise NotFoundError(f"Blog post '{slug}' not found")
        if count_view:
            await self.record_view(blog)
        return blog

    async def record_view(self, blog: Blog) -> None:
        if blog.status == BlogStatus.PUBLISHED.value:
            blog.views_count = (blog.views_count or 0) + 1
            await self.session.commit()

    async def like(self, blog: Blog) -> Blog:
        blog.likes_count = (blog.likes_count or 0) + 1
        return await self.save(blog)

    async def unlike(self, blog: Blog) -> Blog:
        blog.likes_count = max((blog.likes_count or 0) - 1, 0)
        return await self.save(blog)

    async def share(self, blog: Blog) -> Blog:
        blog.shares_count = (blog.shares_count or 0) + 1
        return await self.save(blog)

    async def get_readable(self, blog_id: str, user: Optional[User]) -> Blog:
        """Post *user* may read; anything else is reported as missing."""
        blog = await self.get(blog_id)
        if not can_read_post(blog, user):
            raise NotFoundError(f"{self.label} with ID {blog_id} not found")
        return blog

    async def get_public(self, blog_id: str) -> Blog:
        """Published public post, the only kind readers can like or share."""
        blog = await self.get(blog_id)
        if not is_public_post(blog):
            raise NotFoundError(f"{self.label} with ID {blog_id} not found")
        return blog


class BlogTagService(BaseService[BlogTag]):
    model = BlogTag
    label = "Blog tag"
    search_fields = ("name", "description")

    def default_order(self) -> list[Any]:
        return [BlogTag.name]

    async def ensure_tags(self, names: list[str] | None) -> list[str]:
        """Create a tag row for every new name; the caller commits."""
        cleaned = normalize_tags(names)
        if not cleaned:
            return []
        by_slug = {slugify(name): name for name in cleaned}
        rows = await self.session.execute(
            select(BlogTag).where(BlogTag.slug.in_(list(by_slug)))
        )
        existing = {tag.slug: tag for tag in rows.scalars()}
        for slug, name in by_slug.items():
            tag = existing.get(slug)
            if tag is None:
                self.session.add(BlogTag(name=name, slug=slug))
            elif tag.deleted_at is not None:
                tag.deleted_at = None
        return cleaned

    async def get_by_slug(self, slug: str) -> BlogTag:
        stmt = self.base_query().where(BlogTag.slug == slug)
        tag = (await self.session.execute(stmt)).scalar_one_or_none()
        if tag is None:
            raise NotFoundError(f"Blog tag '{slug}' not found")
        return tag

    async def create_tag(self, data: dict[str, Any]) -> BlogTag:
        data = dict(data)
        data["slug"] = slugify(data.get("slug") or data["name"])
        if not data["slug"]:
            raise ValidationError("Tag name must contain letters or digits")
        await self._ensure_slug_free(data["slug"])
        return await self.create(data)

    async def update_tag(self, tag: BlogTag, data: dict[str, Any]) -> BlogTag:
        data = dict(data)
        if data.get("slug"):
            data["slug"] = slugify(data["slug"])
            if data["slug"] != tag.slug:
                await self._ensure_slug_free(data["slug"])
        return await self.update(tag, data)

    async def delete_tag(self, tag: BlogTag) -> None:
        """Soft-delete *tag* and drop it from every post that uses it."""
        rows = await self.session.execute(select(Blog))
        for blog in rows.scalars():
            kept = [name for name in blog.tags or [] if slugify(name) != tag.slug]
            if len(kept) != len(blog.tags or []):
                blog.tags = kept
        await self.soft_delete(tag)

    async def _ensure_slug_free(self, slug: str) -> None:
        existing = await self.session.execute(
            select(BlogTag.id).where(BlogTag.slug == slug)
        )
        if existing.first() is not None:
            raise ConflictError(f"Blog tag slug '{slug}' already exists")


@dataclass
class CommentThread:
    """A top-level comment with its direct replies, oldest first."""

    comment: BlogComment
    replies: list[BlogComment] = field(default_factory=list)


class BlogCommentService(BaseService[BlogComment]):
    model = BlogComment
    label = "Comment"
    search_fields = ("content",)

    def default_order(self) -> list[Any]:
        return [BlogComment.created_at]

    async def create_comment(
        self, user: User, blog: Blog, content: str, parent_id: Optional[str] = None
    ) -> BlogComment:
        if not blog.allow_comments:
            raise ValidationError("Comments are disabled for this post")
        if parent_id:
            parent = await self.get(parent_id)
            if parent.blog_id != blog.id:
                raise ValidationError("Parent comment does not belong to this post")
            if parent.parent_id is not None:
                # Replies stay one level deep
                parent_id = parent.parent_id
        comment = BlogComment(
            blog_id=blog.id,
            user_id=user.id,
            parent_id=parent_id,
            content=content,
            # The post's author needs no moderation
            is_approved=user.id == blog.user_id,
        )
        self.session.add(comment)
        blog.comments_count = (blog.comments_count or 0) + 1
        comment = await self.save(comment)
        self.log.info(
            "comment_created",
            comment_id=comment.id,
            blog_id=blog.id,
            approved=comment.is_approved,
        )
        return comment

    async def threads(self, blog: Blog, viewer: Optional[User] = None) -> list[CommentThread]:
        """Comments on *blog*; unapproved ones only reach their author and moderators."""
        rows = await self.session.execute(
            self.base_query()
            .where(BlogComment.blog_id == blog.id)
            .order_by(*self.default_order())
        )
        moderator = viewer is not None and (
            viewer.id == blog.user_id or viewer.role == UserRole.ADMIN.value
        )

        def visible(comment: BlogComment) -> bool:
            return (
                comment.is_approved
                or moderator
                or (viewer is not None and comment.user_id == viewer.id)
            )

        comments = [c for c in rows.scalars().all() if visible(c)]
        threads = {c.id: CommentThread(c) for c in comments if c.parent_id is None}
        for comment in comments:
            if comment.parent_id in threads:
                threads[comment.parent_id].replies.append(comment)
        return list(threads.values())

    async def update_comment(
        self, user: User, comment: BlogComment, blog: Blog, data: dict[str, Any]
    ) -> BlogComment:
        data = {k: v for k, v in data.items() if v is not None}
        is_admin = user.role == UserRole.ADMIN.value
        if "content" in data and comment.user_id != user.id and not is_admin:
            raise PermissionDeniedError("You can only edit your own comments")
        if "is_approved" in data and blog.user_id != user.id and not is_admin:
            raise PermissionDeniedError("Only the post's author can moderate comments")
        return await self.update(comment, data)

    async def delete_comment(self, user: User, comment: BlogComment, blog: Blog) -> None:
        allowed = user.id in (comment.user_id, blog.user_id) or (
            user.role == UserRole.ADMIN.value
        )
        if not allowed:
            raise PermissionDeniedError(
                "You can only delete your own comments or comments on your posts"
            )
        blog.comments_count = max((blog.comments_count or 0) - 1, 0)
        await self.soft_delete(comment)

    async def like(self, comment: BlogComment) -> BlogComment:
        comment.likes_count = (comment.likes_count or 0) + 1
        return await self.save(comment)

    async def unlike(self, comment: BlogComment) -> BlogComment:
        comment.likes_count = max((comment.likes_count or 0) - 1, 0)
        return await self.save(comment)
