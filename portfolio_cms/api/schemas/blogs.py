"""Request/response schemas for blog posts, categories, tags and comments."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from portfolio_cms.api.schemas.common import ORMModel, Schema
from portfolio_cms.core.enums import BlogStatus, BlogVisibility


class BlogCategoryCreate(Schema):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)
    display_order: int = 0
    is_active: bool = True


class BlogCategoryUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class BlogCategoryRead(ORMModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    color: Optional[str] = None
    display_order: int
    is_active: bool


class BlogCreate(Schema):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    featured_image_url: Optional[str] = Field(None, max_length=500)
    status: BlogStatus = BlogStatus.DRAFT
    visibility: BlogVisibility = BlogVisibility.PUBLIC
    tags: list[str] = Field(default_factory=list)
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = None
    allow_comments: bool = True
    is_featured: bool = False
    category_id: Optional[str] = None
    portfolio_id: Optional[str] = None


class BlogUpdate(Schema):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    featured_image_url: Optional[str] = Field(None, max_length=500)
    status: Optional[BlogStatus] = None
    visibility: Optional[BlogVisibility] = None
    tags: Optional[list[str]] = None
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = None
    allow_comments: Optional[bool] = None
    is_featured: Optional[bool] = None
    category_id: Optional[str] = None
    portfolio_id: Optional[str] = None


class BlogRead(ORMModel):
    id: str
    user_id: str
    portfolio_id: Optional[str] = None
    category_id: Optional[str] = None
    title: str
    slug: str
    subtitle: Optional[str] = None
    content: str
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    reading_time: int
    status: str
    visibility: str
    tags: list[str] = Field(default_factory=list)
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    allow_comments: bool
    is_featured: bool
    views_count: int
    likes_count: int
    shares_count: int = 0
    comments_count: int = 0
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class BlogTagCreate(Schema):
    name: str = Field(..., min_length=1, max_length=50)
    slug: Optional[str] = Field(None, max_length=60)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class BlogTagUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    slug: Optional[str] = Field(None, max_length=60)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class BlogTagRead(ORMModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    color: Optional[str] = None


class BlogCommentCreate(Schema):
    content: str = Field(..., min_length=1, max_length=5000)
    parent_id: Optional[str] = None


class BlogCommentUpdate(Schema):
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    is_approved: Optional[bool] = None


class BlogCommentRead(ORMModel):
    id: str
    blog_id: str
    user_id: str
    parent_id: Optional[str] = None
    content: str
    is_approved: bool
    likes_count: int
    created_at: datetime
    updated_at: datetime


class BlogCommentThread(BlogCommentRead):
    replies: list[BlogCommentRead] = Field(default_factory=list)
