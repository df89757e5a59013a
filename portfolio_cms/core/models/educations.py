"""Education history, including certificates and online courses."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Education(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "educations"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    portfolio_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("portfolios.id", ondelete="SET NULL"), nullable=True
    )
    institution_name: Mapped[str] = mapped_column(String(255), nullable=False)
    institution_logo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    institution_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    degree: Mapped[str] = mapped_column(String(255), nullable=False)
    field_of_study: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    education_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="bachelor"
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_remote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gpa: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    courses: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    honors: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    activities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    achievements: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_highlighted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    certificate_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    verification_method: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )

    __table_args__ = (
        Index("ix_educations_user_id", "user_id"),
        Index("ix_educations_portfolio_id", "portfolio_id"),
    )

    def __repr__(self) -> str:
        return f"<Education(id={self.id}, institution={self.institution_name}, degree={self.degree})>"
