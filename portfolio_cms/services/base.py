"""Generic async CRUD service shared by every entity service.

A service wraps one ``AsyncSession`` (one per request) and one model class.
Subclasses set ``model``, ``label`` and ``search_fields`` and add their own
domain rules on top of:

- get / list (filters, case-insensitive search, 1-based pagination)
- create / update (commit + refresh)
- soft_delete / restore / permanent_delete
- reorder (display_order = position in the supplied id list)
- ensure_owner (owner or admin may write)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_cms.core.enums import UserRole
from portfolio_cms.core.exceptions import NotFoundError, PermissionDeniedError
from portfolio_cms.core.models.base import Base
from portfolio_cms.core.models.users import User
from portfolio_cms.core.utils.logging_config import get_logger

ModelT = TypeVar("ModelT", bound=Base)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class Page(Generic[ModelT]):
    """One page of a paginated listing; ``total`` counts all matching rows."""

    items: list[ModelT]
    total: int


def clamp_pagination(page: int, size: int) -> tuple[int, int]:
    return max(page, 1), min(max(size, 1), MAX_PAGE_SIZE)


class BaseService(Generic[ModelT]):
    model: type[ModelT]
    label: str = "Record"
    search_fields: tuple[str, ...] = ()

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.log = get_logger(type(self).__name__)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def base_query(self, include_deleted: bool = False) -> Select:
        stmt = select(self.model)
        if self.soft_deletes and not include_deleted:
            stmt = stmt.where(self.model.deleted_at.is_(None))
        return stmt

    def default_order(self) -> list[Any]:
        return [self.model.created_at.desc()]

    def apply_filters(self, stmt: Select, filters: dict[str, Any] | None) -> Select:
        for key, value in (filters or {}).items():
            if value is None:
                continue
            stmt = stmt.where(getattr(self.model, key) == value)
        return stmt

    def apply_search(self, stmt: Select, search: str | None) -> Select:
        term = (search or "").strip()
        if not term or not self.search_fields:
            return stmt
        pattern = f"%{term}%"
        return stmt.where(
            or_(*(getattr(self.model, f).ilike(pattern) for f in self.search_fields))
        )

    async def paginate(
        self,
        stmt: Select,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
        order_by: Sequence[Any] | None = None,
    ) -> Page[ModelT]:
        page, size = clamp_pagination(page, size)
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()
        rows = await self.session.execute(
            stmt.order_by(*(order_by or self.default_order()))
            .offset((page - 1) * size)
            .limit(size)
        )
        return Page(items=list(rows.scalars().all()), total=total)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get(self, record_id: str, include_deleted: bool = False) -> ModelT:
        stmt = self.base_query(include_deleted).where(self.model.id == record_id)
        obj = (await self.session.execute(stmt)).scalar_one_or_none()
        if obj is None:
            raise NotFoundError(f"{self.label} with ID {record_id} not found")
        return obj

    async def list(
        self,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
        order_by: Sequence[Any] | None = None,
    ) -> Page[ModelT]:
        stmt = self.apply_search(self.apply_filters(self.base_query(), filters), search)
        return await self.paginate(stmt, page, size, order_by)

    async def all_for_user(self, user_id: str, **filters: Any) -> list[ModelT]:
        stmt = self.apply_filters(
            self.base_query().where(self.model.user_id == user_id), filters
        )
        rows = await self.session.execute(stmt.order_by(*self.default_order()))
        return list(rows.scalars().all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def save(self, obj: ModelT) -> ModelT:
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def create(self, data: dict[str, Any], **extra: Any) -> ModelT:
        obj = self.model(**{**data, **extra})
        obj = await self.save(obj)
        self.log.info("record_created", model=self.label, record_id=obj.id)
        return obj

    async def update(self, obj: ModelT, data: dict[str, Any]) -> ModelT:
        for key, value in data.items():
            setattr(obj, key, value)
        obj = await self.save(obj)
        self.log.info("record_updated", model=self.label, record_id=obj.id)
        return obj

    async def soft_delete(self, obj: ModelT) -> None:
        if not self.soft_deletes:
            await self.permanent_delete(obj)
            return
        obj.deleted_at = datetime.now(timezone.utc)
        await self.session.commit()
        self.log.info("record_soft_deleted", model=self.label, record_id=obj.id)

    async def restore(self, record_id: str) -> ModelT:
        obj = await self.get(record_id, include_deleted=True)
        if obj.deleted_at is None:
            raise NotFoundError(f"{self.label} with ID {record_id} is not deleted")
        obj.deleted_at = None
        obj = await self.save(obj)
        self.log.info("record_restored", model=self.label, record_id=obj.id)
        return obj

    async def permanent_delete(self, obj: ModelT) -> None:
        record_id = obj.id
        await self.session.delete(obj)
        await self.session.commit()
        self.log.info("record_deleted", model=self.label, record_id=record_id)

    async def reorder(self, user_id: str, ids: Iterable[str]) -> list[ModelT]:
        """Set ``display_order`` to each id's position in *ids*."""
        ids = list(ids)
        stmt = self.base_query().where(
            self.model.id.in_(ids), self.model.user_id == user_id
        )
        rows = {obj.id: obj for obj in (await self.session.execute(stmt)).scalars()}
        if len(rows) != len(set(ids)):
            raise NotFoundError(
                f"One or more {self.label.lower()} records not found "
                "or don't belong to the user"
            )
        for index, record_id in enumerate(ids):
            rows[record_id].display_order = index
        await self.session.commit()
        self.log.info("records_reordered", model=self.label, count=len(ids))
        return [rows[record_id] for record_id in ids]

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------
    @staticmethod
    def ensure_owner(obj: Any, user: Optional[User]) -> None:
        if user is None:
            raise PermissionDeniedError("Authentication required")
        if user.role == UserRole.ADMIN.value:
            return
        if getattr(obj, "user_id", None) != user.id:
            raise PermissionDeniedError("You do not have permission to modify this resource")

    async def get_owned(self, record_id: str, user: User) -> ModelT:
        obj = await self.get(record_id)
        self.ensure_owner(obj, user)
        return obj
