"""Request/response schemas for portfolios and the public portfolio payload."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from portfolio_cms.api.schemas.blogs import BlogRead
from portfolio_cms.api.schemas.content import (
    EducationRead,
    ExperienceRead,
    ProjectRead,
    SkillCategoryRead,
    SkillRead,
)
from portfolio_cms.api.schemas.common import ORMModel, Schema
from portfolio_cms.api.schemas.engagement import SocialLinkCreate, SocialLinkRead
from portfolio_cms.api.schemas.users import PublicUserRead
from portfolio_cms.core.enums import PortfolioTheme, Visibility

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class PortfolioBase(Schema):
    title: Optional[str] = Field(None, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    summary: Optional[str] = None
    theme: PortfolioTheme = PortfolioTheme.MODERN
    primary_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    secondary_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    visibility: Visibility = Visibility.PUBLIC
    custom_domain: Optional[str] = Field(None, max_length=255)
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = None
    meta_keywords: Optional[list[str]] = None
    sections: Optional[dict[str, Any]] = None
    settings: Optional[dict[str, Any]] = None
    resume_id: Optional[str] = None
    cover_image_id: Optional[str] = None
    profile_image_id: Optional[str] = None
    is_published: bool = False


class PortfolioCreate(PortfolioBase):
    name: str = Field(..., min_length=1, max_length=255)
    social_links: Optional[list[SocialLinkCreate]] = None


class PortfolioUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    summary: Optional[str] = None
    theme: Optional[PortfolioTheme] = None
    primary_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    secondary_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    visibility: Optional[Visibility] = None
    custom_domain: Optional[str] = Field(None, max_length=255)
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = None
    meta_keywords: Optional[list[str]] = None
    sections: Optional[dict[str, Any]] = None
    settings: Optional[dict[str, Any]] = None
    resume_id: Optional[str] = None
    cover_image_id: Optional[str] = None
    profile_image_id: Optional[str] = None
    is_published: Optional[bool] = None
    social_links: Optional[list[SocialLinkCreate]] = None


class FeatureRequest(Schema):
    is_featured: bool


class PortfolioRead(ORMModel):
    id: str
    user_id: str
    name: str
    title: Optional[str] = None
    subtitle: Optional[str] = None
    summary: Optional[str] = None
    theme: str
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    visibility: str
    custom_domain: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[list[str]] = None
    sections: Optional[dict[str, Any]] = None
    settings: Optional[dict[str, Any]] = None
    resume_id: Optional[str] = None
    cover_image_id: Optional[str] = None
    profile_image_id: Optional[str] = None
    is_published: bool
    is_featured: bool
    published_at: Optional[datetime] = None
    view_count: int = 0
    created_at: datetime
    updated_at: datetime


class SkillGroupRead(ORMModel):
    category: Optional[SkillCategoryRead] = None
    skills: list[SkillRead]


class PublicPortfolioRead(ORMModel):
    portfolio: PortfolioRead
    owner: PublicUserRead
    projects: list[ProjectRead]
    experiences: list[ExperienceRead]
    educations: list[EducationRead]
    skill_groups: list[SkillGroupRead]
    social_links: list[SocialLinkRead]
    blogs: list[BlogRead]
