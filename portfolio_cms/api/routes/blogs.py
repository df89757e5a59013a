"""Blog post, category, tag and comment endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request

from portfolio_cms.api.auth import AdminUser, CurrentUser, OptionalUser
from portfolio_cms.api.deps import Cache, DbSession, Pagination, invalidate_owner
from portfolio_cms.api.limiter import ENGAGEMENT_LIMIT, limiter
from portfolio_cms.api.schemas.blogs import (
    BlogCategoryCreate,
    BlogCategoryRead,
    BlogCategoryUpdate,
    BlogCommentCreate,
    BlogCommentRead,
    BlogCommentThread,
    BlogCommentUpdate,
    BlogCreate,
    BlogRead,
    BlogTagCreate,
    BlogTagRead,
    BlogTagUpdate,
    BlogUpdate,
)
from portfolio_cms.api.schemas.common import MessageResponse, Paginated, page_of
from portfolio_cms.core.enums import BlogStatus, BlogVisibility
from portfolio_cms.core.exceptions import NotFoundError
from portfolio_cms.services.blogs import (
    BlogCategoryService,
    BlogCommentService,
    BlogService,
    BlogTagService,
    can_read_post,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blogs", tags=["Blogs"])


# ---------------------------------------------------------------------------
# Categories (admin managed, publicly readable)
# ---------------------------------------------------------------------------
@router.get("/categories", response_model=list[BlogCategoryRead])
async def list_categories(session: DbSession):
    page = await BlogCategoryService(session).list(
        filters={"is_active": True}, size=100
    )
    return page.items


@router.post("/categories", response_model=BlogCategoryRead, status_code=201)
async def create_category(body: BlogCategoryCreate, admin: AdminUser, session: DbSession):
    return await BlogCategoryService(session).create_category(body.model_dump())


@router.patch("/categories/{category_id}", response_model=BlogCategoryRead)
async def update_category(
    category_id: str, body: BlogCategoryUpdate, admin: AdminUser, session: DbSession
):
    service = BlogCategoryService(session)
    return await service.update_category(
        await service.get(category_id), body.model_dump(exclude_unset=True)
    )


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(category_id: str, admin: AdminUser, session: DbSession):
    service = BlogCategoryService(session)
    await service.soft_delete(await service.get(category_id))
    return MessageResponse(message="Blog category deleted successfully")


# ---------------------------------------------------------------------------
# Tags (admin managed, publicly readable; created implicitly by posts)
# ---------------------------------------------------------------------------
@router.get("/tags", response_model=list[BlogTagRead])
async def list_tags(session: DbSession, search: Optional[str] = Query(None, max_length=100)):
    page = await BlogTagService(session).list(search=search, size=100)
    return page.items


@router.get("/tags/slug/{slug}", response_model=BlogTagRead)
async def get_tag_by_slug(slug: str, session: DbSession):
    return await BlogTagService(session).get_by_slug(slug)


@router.post("/tags", response_model=BlogTagRead, status_code=201)
async def create_tag(body: BlogTagCreate, admin: AdminUser, session: DbSession):
    return await BlogTagService(session).create_tag(body.model_dump())


@router.patch("/tags/{tag_id}", response_model=BlogTagRead)
async def update_tag(tag_id: str, body: BlogTagUpdate, admin: AdminUser, session: DbSession):
    service = BlogTagService(session)
    return await service.update_tag(
        await service.get(tag_id), body.model_dump(exclude_unset=True)
    )


@router.delete("/tags/{tag_id}", response_model=MessageResponse)
async def delete_tag(tag_id: str, admin: AdminUser, session: DbSession):
    service = BlogTagService(session)
    await service.delete_tag(await service.get(tag_id))
    return MessageResponse(message="Blog tag deleted successfully")


# ---------------------------------------------------------------------------
# Comments addressed by their own id
# ---------------------------------------------------------------------------
@router.get("/comments/{comment_id}", response_model=BlogCommentRead)
async def get_comment(comment_id: str, session: DbSession, user: OptionalUser):
    comment = await BlogCommentService(session).get(comment_id)
    blog = await BlogService(session).get_readable(comment.blog_id, user)
    threads = await BlogCommentService(session).threads(blog, user)
    visible = {c.id for t in threads for c in (t.comment, *t.replies)}
    if comment.id not in visible:
        raise NotFoundError(f"Comment with ID {comment_id} not found")
    return comment


@router.patch("/comments/{comment_id}", response_model=BlogCommentRead)
async def update_comment(
    comment_id: str, body: BlogCommentUpdate, user: CurrentUser, session: DbSession
):
    service = BlogCommentService(session)
    comment = await service.get(comment_id)
    blog = await BlogService(session).get(comment.blog_id)
    return await service.update_comment(
        user, comment, blog, body.model_dump(exclude_unset=True)
    )


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(comment_id: str, user: CurrentUser, session: DbSession):
    service = BlogCommentService(session)
    comment = await service.get(comment_id)
    blog = await BlogService(session).get(comment.blog_id)
    await service.delete_comment(user, comment, blog)
    return MessageResponse(message="Comment deleted successfully")


@router.post("/comments/{comment_id}/like", response_model=BlogCommentRead)
@limiter.limit(ENGAGEMENT_LIMIT)
async def like_comment(
    request: Request, comment_id: str, user: CurrentUser, session: DbSession
):
    service = BlogCommentService(session)
    comment = await service.get(comment_id)
    await BlogService(session).get_public(comment.blog_id)
    if not comment.is_approved:
        raise NotFoundError(f"Comment with ID {comment_id} not found")
    return await service.like(comment)


@router.post("/comments/{comment_id}/unlike", response_model=BlogCommentRead)
@limiter.limit(ENGAGEMENT_LIMIT)
async def unlike_comment(
    request: Request, comment_id: str, user: CurrentUser, session: DbSession
):
    service = BlogCommentService(session)
    comment = await service.get(comment_id)
    await BlogService(session).get_public(comment.blog_id)
    if not comment.is_approved:
        raise NotFoundError(f"Comment with ID {comment_id} not found")
    return await service.unlike(comment)


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------
@router.get("", response_model=Paginated[BlogRead])
async def list_my_posts(
    user: CurrentUser,
    session: DbSession,
    params: Pagination,
    status: Optional[BlogStatus] = Query(None),
    category_id: Optional[str] = Query(None),
    tag: Optional[str] = Query(None, max_length=100),
    is_featured: Optional[bool] = Query(None),
):
    result = await BlogService(session).list_posts(
        user_id=user.id,
        status=status.value if status else None,
        category_id=category_id,
        tag=tag,
        is_featured=is_featured,
        search=params.search,
        page=params.page,
        size=params.size,
    )
    return page_of(BlogRead, result)


@router.post("", response_model=BlogRead, status_code=201)
async def create_post(body: BlogCreate, user: CurrentUser, session: DbSession, cache: Cache):
    blog = await BlogService(session).create_post(user.id, body.model_dump())
    await invalidate_owner(cache, session, user.id)
    return blog


@router.get("/published", response_model=Paginated[BlogRead])
async def list_published_posts(
    session: DbSession,
    params: Pagination,
    user_id: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None),
    tag: Optional[str] = Query(None, max_length=100),
    is_featured: Optional[bool] = Query(None),
):
    result = await BlogService(session).list_posts(
        user_id=user_id,
        status=BlogStatus.PUBLISHED.value,
        visibility=BlogVisibility.PUBLIC.value,
        category_id=category_id,
        tag=tag,
        is_featured=is_featured,
        search=params.search,
        page=params.page,
        size=params.size,
    )
    return page_of(BlogRead, result)


@router.get("/slug/{slug}", response_model=BlogRead)
async def get_post_by_slug(slug: str, session: DbSession, user: OptionalUser):
    """Published public posts are open to all; others only to their author."""
    service = BlogService(session)
    blog = await service.get_by_slug(slug, count_view=False)
    if not can_read_post(blog, user):
        raise NotFoundError(f"Blog post '{slug}' not found")
    await service.record_view(blog)
    return blog


@router.get("/{blog_id}", response_model=BlogRead)
async def get_post(blog_id: str, user: CurrentUser, session: DbSession):
    return await BlogService(session).get_owned(blog_id, user)


@router.patch("/{blog_id}", response_model=BlogRead)
async def update_post(
    blog_id: str, body: BlogUpdate, user: CurrentUser, session: DbSession, cache: Cache
):
    service = BlogService(session)
    blog = await service.get_owned(blog_id, user)
    blog = await service.update_post(blog, body.model_dump(exclude_unset=True))
    await invalidate_owner(cache, session, blog.user_id)
    return blog


@router.post("/{blog_id}/like", response_model=BlogRead)
@limiter.limit(ENGAGEMENT_LIMIT)
async def like_post(request: Request, blog_id: str, user: CurrentUser, session: DbSession):
    service = BlogService(session)
    return await service.like(await service.get_public(blog_id))


@router.post("/{blog_id}/unlike", response_model=BlogRead)
@limiter.limit(ENGAGEMENT_LIMIT)
async def unlike_post(request: Request, blog_id: str, user: CurrentUser, session: DbSession):
    service = BlogService(session)
    return await service.unlike(await service.get_public(blog_id))


@router.post("/{blog_id}/share", response_model=BlogRead)
@limiter.limit(ENGAGEMENT_LIMIT)
async def share_post(request: Request, blog_id: str, session: DbSession):
    """Anonymous share counter for published public posts."""
    service = BlogService(session)
    return await service.share(await service.get_public(blog_id))


@router.get("/{blog_id}/comments", response_model=list[BlogCommentThread])
async def list_comments(blog_id: str, session: DbSession, user: OptionalUser):
    blog = await BlogService(session).get_readable(blog_id, user)
    threads = await BlogCommentService(session).threads(blog, user)
    return [
        BlogCommentThread.model_validate(
            {
                **thread.comment.to_dict(),
                "replies": [BlogCommentRead.model_validate(r) for r in thread.replies],
            }
        )
        for thread in threads
    ]


@router.post("/{blog_id}/comments", response_model=BlogCommentRead, status_code=201)
@limiter.limit(ENGAGEMENT_LIMIT)
async def create_comment(
    request: Request,
    blog_id: str,
    body: BlogCommentCreate,
    user: CurrentUser,
    session: DbSession,
):
    blog = await BlogService(session).get_readable(blog_id, user)
    return await BlogCommentService(session).create_comment(
        user, blog, body.content, body.parent_id
    )


@router.delete("/{blog_id}", response_model=MessageResponse)
async def delete_post(blog_id: str, user: CurrentUser, session: DbSession, cache: Cache):
    service = BlogService(session)
    blog = await service.get_owned(blog_id, user)
    await service.soft_delete(blog)
    await invalidate_owner(cache, session, blog.user_id)
    return MessageResponse(message="Blog post deleted successfully")


@router.post("/{blog_id}/restore", response_model=BlogRead)
async def restore_post(blog_id: str, user: CurrentUser, session: DbSession, cache: Cache):
    service = BlogService(session)
    service.ensure_owner(await service.get(blog_id, include_deleted=True), user)
    blog = await service.restore(blog_id)
    await invalidate_owner(cache, session, blog.user_id)
    return blog


@router.delete("/{blog_id}/permanent", response_model=MessageResponse)
async def permanently_delete_post(
    blog_id: str, user: CurrentUser, session: DbSession, cache: Cache
):
    service = BlogService(session)
    blog = await service.get(blog_id, include_deleted=True)
    service.ensure_owner(blog, user)
    owner_id = blog.user_id
    await service.permanent_delete(blog)
    logger.info("Blog post %s permanently deleted by %s", blog_id, user.id)
    await invalidate_owner(cache, session, owner_id)
    return MessageResponse(message="Blog post permanently deleted")
