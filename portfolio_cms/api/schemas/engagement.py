"""Request/response schemas for social links, contact messages and analytics."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import EmailStr, Field

from portfolio_cms.api.schemas.common import ORMModel, Schema
from portfolio_cms.core.enums import AnalyticsPeriod, ContactStatus, SocialPlatform


# ---------------------------------------------------------------------------
# Social links
# ---------------------------------------------------------------------------
class SocialLinkCreate(Schema):
    platform: SocialPlatform
    url: str = Field(..., min_length=1, max_length=500)
    label: Optional[str] = Field(None, max_length=100)
    username: Optional[str] = Field(None, max_length=100)
    display_order: Optional[int] = None
    is_active: bool = True
    show_in_nav: bool = False
    open_in_new_tab: bool = True
    metadata_json: Optional[dict[str, Any]] = None


class SocialLinkUpdate(Schema):
    platform: Optional[SocialPlatform] = None
    url: Optional[str] = Field(None, min_length=1, max_length=500)
    label: Optional[str] = Field(None, max_length=100)
    username: Optional[str] = Field(None, max_length=100)
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    show_in_nav: Optional[bool] = None
    open_in_new_tab: Optional[bool] = None
    metadata_json: Optional[dict[str, Any]] = None


class BulkActiveRequest(Schema):
    ids: list[str] = Field(..., min_length=1)
    is_active: bool


class SocialLinkRead(ORMModel):
    id: str
    user_id: str
    portfolio_id: Optional[str] = None
    platform: str
    url: str
    label: Optional[str] = None
    username: Optional[str] = None
    display_order: int
    is_active: bool
    show_in_nav: bool
    open_in_new_tab: bool
    click_count: int
    metadata_json: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------
class ContactCreate(Schema):
    portfolio_id: str
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    subject: Optional[str] = Field(None, max_length=255)
    message: str = Field(..., min_length=1, max_length=5000)
    phone: Optional[str] = Field(None, max_length=30)
    company: Optional[str] = Field(None, max_length=255)


class ContactStatusUpdate(Schema):
    status: ContactStatus


class ContactRead(ORMModel):
    id: str
    portfolio_id: Optional[str] = None
    user_id: Optional[str] = None
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    phone: Optional[str] = None
    company: Optional[str] = None
    status: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
class PageViewCreate(Schema):
    portfolio_id: str
    page_path: str = Field(..., min_length=1, max_length=500)
    page_title: Optional[str] = Field(None, max_length=255)
    visitor_id: Optional[str] = Field(None, max_length=64)
    session_id: Optional[str] = Field(None, max_length=64)
    referrer: Optional[str] = Field(None, max_length=1000)
    user_agent: Optional[str] = None
    language: Optional[str] = Field(None, max_length=20)
    time_on_page: int = Field(0, ge=0)
    scroll_depth: int = Field(0, ge=0, le=100)
    utm_source: Optional[str] = Field(None, max_length=100)
    utm_medium: Optional[str] = Field(None, max_length=100)
    utm_campaign: Optional[str] = Field(None, max_length=100)


class TrackResponse(ORMModel):
    success: bool
    analytics_id: str
    is_new_visitor: bool
    visitor_id: str
    session_id: str


class AnalyticsQuery(Schema):
    period: AnalyticsPeriod = AnalyticsPeriod.MONTH


class PageViewRead(ORMModel):
    id: str
    page_path: str
    page_title: Optional[str] = None
    referrer_domain: Optional[str] = None
    device_type: str
    browser: Optional[str] = None
    operating_system: Optional[str] = None
    time_on_page: int
    scroll_depth: int
    session_id: str
    created_at: datetime


class VisitorRead(ORMModel):
    visitor_id: str
    portfolio_id: str
    first_visit: datetime
    last_visit: datetime
    visit_count: int
    page_views: int
    total_time_spent: int
    first_referrer: Optional[str] = None
    first_landing_page: Optional[str] = None
    primary_device: Optional[str] = None
    primary_browser: Optional[str] = None
    primary_os: Optional[str] = None
    engagement_score: float


class VisitorJourney(ORMModel):
    visitor: VisitorRead
    journey: list[PageViewRead]
    total_pages: int
    total_time: int
    first_visit: Optional[datetime] = None
    last_visit: Optional[datetime] = None
