"""Page-view tracking and per-portfolio visitor aggregates."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow


class PageView(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "page_views"

    portfolio_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    visitor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False)
    page_path: Mapped[str] = mapped_column(String(500), nullable=False)
    page_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    referrer: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    referrer_domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    device_type: Mapped[str] = mapped_column(String(20), nullable=False, default="desktop")
    browser: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    operating_system: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    time_on_page: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scroll_depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_bot: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_unique_visitor: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_returning_visitor: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    utm_source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    utm_medium: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    utm_campaign: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        Index("ix_page_views_portfolio_created", "portfolio_id", "created_at"),
        Index("ix_page_views_visitor_id", "visitor_id"),
    )

    def __repr__(self) -> str:
        return f"<PageView(portfolio_id={self.portfolio_id}, path={self.page_path})>"


class Visitor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "visitors"

    visitor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    portfolio_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    first_visit: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    last_visit: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    page_views: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_time_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    first_referrer: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    last_referrer: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    first_landing_page: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True
    )
    last_landing_page: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True
    )
    primary_device: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    primary_browser: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    primary_os: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_bot: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    engagement_score: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "visitor_id", "portfolio_id", name="uq_visitors_visitor_portfolio"
        ),
    )

    def __repr__(self) -> str:
        return f"<Visitor(visitor_id={self.visitor_id}, visits={self.visit_count})>"
