"""In-memory cache of paginated API listings, patched in place after writes.

Each entry maps a tuple query key to an ``InfiniteData``: the pages loaded
so far (``{"data": [...], "total": n}`` responses) and the page numbers
that produced them. Writes made through the client patch every cached
listing for the resource instead of refetching it.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any, Optional

QueryKey = tuple[Hashable, ...]


@dataclass
class PageData:
    total: int
    data: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class InfiniteData:
    pages: list[PageData] = field(default_factory=list)
    page_params: list[int] = field(default_factory=list)


class QueryCache:
    def __init__(self) -> None:
        self._entries: dict[QueryKey, Any] = {}

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------
    def get(self, key: QueryKey) -> Any:
        return self._entries.get(key)

    def set(self, key: QueryKey, value: Any) -> None:
        self._entries[key] = value

    def remove(self, key: QueryKey) -> None:
        self._entries.pop(key, None)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def keys_matching(self, title: str) -> list[QueryKey]:
        """Every key that contains *title* as one of its elements."""
        return [key for key in self._entries if title in key]

    def _infinite(self, key: QueryKey) -> Optional[InfiniteData]:
        entry = self._entries.get(key)
        return entry if isinstance(entry, InfiniteData) else None

    # ------------------------------------------------------------------
    # Patching
    # ------------------------------------------------------------------
    def upsert_record(self, key: QueryKey, record: dict[str, Any]) -> None:
        """Replace the record wherever it appears, else add it to the last page."""
        cached = self._infinite(key)
        if cached is None or not cached.pages:
            return
        found = False
        for page in cached.pages:
            for index, item in enumerate(page.data):
                if item.get("id") == record.get("id"):
                    page.data[index] = record
                    found = True
        if not found:
            last = cached.pages[-1]
            last.data.insert(0, record)
            last.total += 1

    def remove_record(self, key: QueryKey, record_id: Any) -> None:
        # Every page carries the listing total, so each one is decremented
        cached = self._infinite(key)
        if cached is None:
            return
        for page in cached.pages:
            page.data = [item for item in page.data if item.get("id") != record_id]
            page.total -= 1

    def change_count(self, key: QueryKey, delta: int) -> None:
        cached = self._infinite(key)
        if cached is None:
            return
        for page in cached.pages:
            page.total += delta

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def flatten(self, key: QueryKey) -> list[dict[str, Any]]:
        cached = self._infinite(key)
        if cached is None:
            return []
        return [item for page in cached.pages for item in page.data]

    def count(self, key: QueryKey) -> Optional[int]:
        cached = self._infinite(key)
        if cached is None or not cached.pages:
            return None
        return cached.pages[0].total

    def next_page_param(self, key: QueryKey) -> Optional[int]:
        cached = self._infinite(key)
        if cached is None or not cached.pages:
            return 1
        loaded = sum(len(page.data) for page in cached.pages)
        if loaded < cached.pages[-1].total:
            return len(cached.pages) + 1
        return None
