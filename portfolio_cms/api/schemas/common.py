"""Shared Pydantic v2 building blocks for request and response models."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Schema(BaseModel):
    """Request body base: enums are dumped as their plain string values."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)


class ORMModel(BaseModel):
    """Response base populated from SQLAlchemy objects."""

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Generic list envelope
# ---------------------------------------------------------------------------
class Paginated(BaseModel, Generic[T]):
    """Paginated listing: one page of ``data`` plus the overall ``total``."""

    data: list[T]
    total: int


class MessageResponse(BaseModel):
    message: str


class ReorderRequest(Schema):
    """Ids in their new display order."""

    ids: list[str] = Field(..., min_length=1)


def page_of(schema: type[BaseModel], page: Any) -> Paginated:
    """Build a ``Paginated[schema]`` from a service ``Page``."""
    return Paginated[schema](
        data=[schema.model_validate(item) for item in page.items],
        total=page.total,
    )
