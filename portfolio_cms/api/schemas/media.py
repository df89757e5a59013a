"""Response and update schemas for uploaded images."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from portfolio_cms.api.schemas.common import ORMModel, Schema
from portfolio_cms.core.enums import ImageCategory


class ImageVariantRead(ORMModel):
    size: str
    format: str
    width: int
    height: int
    file_size: int
    url: str


class ImageRead(ORMModel):
    id: str
    user_id: str
    original_name: str
    filename: str
    mimetype: str
    size: int
    category: str
    status: str
    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = None
    alt_text: Optional[str] = None
    caption: Optional[str] = None
    focal_point_x: Optional[float] = None
    focal_point_y: Optional[float] = None
    dominant_color: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    metadata_json: Optional[dict[str, Any]] = None
    url: str
    is_public: bool
    created_at: datetime
    variants: list[ImageVariantRead] = Field(default_factory=list)


class ImageUpdate(Schema):
    title: Optional[str] = Field(None, max_length=255)
    alt_text: Optional[str] = Field(None, max_length=255)
    caption: Optional[str] = None
    category: Optional[ImageCategory] = None
    focal_point_x: Optional[float] = Field(None, ge=0, le=1)
    focal_point_y: Optional[float] = Field(None, ge=0, le=1)
    tags: Optional[list[str]] = None
    is_public: Optional[bool] = None
