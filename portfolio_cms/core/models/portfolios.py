"""Portfolio: one per user, the root of the public site.

The portfolio id equals the owning user's id so that the public site can
address a portfolio by either.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Portfolio(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "portfolios"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    subtitle: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    theme: Mapped[str] = mapped_column(String(20), nullable=False, default="modern")
    primary_color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    secondary_color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    visibility: Mapped[str] = mapped_column(
        String(20), nullable=False, default="public"
    )
    custom_domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    meta_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    meta_keywords: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)
    sections: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    settings: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    resume_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    cover_image_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    profile_image_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_viewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_portfolios_user_id", "user_id"),
        Index("ix_portfolios_published", "is_published", "visibility"),
    )

    def __repr__(self) -> str:
        return f"<Portfolio(id={self.id}, name={self.name}, published={self.is_published})>"
