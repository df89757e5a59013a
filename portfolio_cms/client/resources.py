"""Paginated listing and mutation helpers built on the API client and cache.

ResourceList loads ``GET /<resource>`` page by page into a QueryCache entry
keyed by ``(resource, search, params)``; ResourceMutator writes records and
patches every cached listing of the resource in place.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from collections.abc import Awaitable, Callable
from typing import Any, Optional

import structlog

from portfolio_cms.client.api_client import PortfolioApiClient
from portfolio_cms.client.query_cache import InfiniteData, PageData, QueryCache, QueryKey

SEARCH_DEBOUNCE_SECONDS = 0.3

logger = structlog.get_logger(__name__)


class Debouncer:
    """Run only the most recently scheduled callable, *delay* seconds later."""

    def __init__(self, delay: float = SEARCH_DEBOUNCE_SECONDS) -> None:
        self.delay = delay
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def call(self, fn: Callable[[], Any]) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(fn))
        return self._task

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()

    async def _run(self, fn: Callable[[], Any]) -> Any:
        await asyncio.sleep(self.delay)
        result = fn()
        if inspect.isawaitable(result):
            result = await result
        return result


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------
class ResourceList:
    def __init__(
        self,
        client: PortfolioApiClient,
        cache: QueryCache,
        resource: str,
        size: int = 10,
        params: Optional[dict[str, Any]] = None,
        search_delay: float = SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        self.client = client
        self.cache = cache
        self.resource = resource
        self.size = size
        self.params = params
        self.search = ""
        self.debounced_search = ""
        self._debouncer = Debouncer(search_delay)

    @property
    def query_key(self) -> QueryKey:
        return (
            self.resource,
            self.debounced_search,
            json.dumps(self.params, sort_keys=True, default=str),
        )

    @property
    def items(self) -> list[dict[str, Any]]:
        return self.cache.flatten(self.query_key)

    @property
    def count(self) -> Optional[int]:
        return self.cache.count(self.query_key)

    @property
    def has_next_page(self) -> bool:
        return self.cache.next_page_param(self.query_key) is not None

    async def _fetch_page(self, page: int) -> PageData:
        response = await self.client.get(
            f"/{self.resource}",
            {
                "page": page,
                "size": self.size,
                "search": self.debounced_search,
                **(self.params or {}),
            },
        )
        return PageData(total=response["total"], data=list(response["data"]))

    async def fetch_next_page(self) -> Optional[PageData]:
        key = self.query_key
        page = self.cache.next_page_param(key)
        if page is None:
            return None
        loaded = await self._fetch_page(page)
        entry = self.cache.get(key)
        if not isinstance(entry, InfiniteData):
            entry = InfiniteData()
            self.cache.set(key, entry)
        entry.pages.append(loaded)
        entry.page_params.append(page)
        return loaded

    async def refetch(self) -> None:
        """Reload every page loaded so far under the current key."""
        key = self.query_key
        entry = self.cache.get(key)
        page_params = entry.page_params if isinstance(entry, InfiniteData) else []
        fresh = InfiniteData()
        for page in page_params or [1]:
            fresh.pages.append(await self._fetch_page(page))
            fresh.page_params.append(page)
        self.cache.set(key, fresh)

    def change_count(self, delta: int) -> None:
        self.cache.change_count(self.query_key, delta)

    def set_search(self, term: str) -> asyncio.Task:
        """Debounced search: only the last term within the window is applied."""
        self.search = term
        return self._debouncer.call(lambda: self._apply_search(term))

    def _apply_search(self, term: str) -> None:
        self.debounced_search = term


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
class ResourceMutator:
    def __init__(
        self,
        client: PortfolioApiClient,
        cache: QueryCache,
        resource: str,
        singular: Optional[str] = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.resource = resource
        self.singular = singular or resource
        self._current: Optional[asyncio.Task] = None

    @property
    def mutating(self) -> bool:
        return self._current is not None and not self._current.done()

    def detail_key(self, record_id: Any) -> QueryKey:
        return (self.singular, "detail", record_id)

    def cancel(self) -> None:
        if self.mutating:
            self._current.cancel()

    async def _run(self, work: Awaitable[Any]) -> Any:
        # A newer mutation supersedes the one in flight
        self.cancel()
        task = asyncio.ensure_future(work)
        self._current = task
        try:
            return await task
        finally:
            if self._current is task:
                self._current = None

    async def save(self, data: dict[str, Any]) -> dict[str, Any]:
        """PATCH when *data* names an existing record (``id`` or ``edit``), else POST."""
        return await self._run(self._save(data))

    async def remove(self, record_id: Any) -> None:
        await self._run(self._remove(record_id))

    async def _save(self, data: dict[str, Any]) -> dict[str, Any]:
        record_id = data.get("id") or data.get("edit")
        body = {k: v for k, v in data.items() if k != "edit"}
        if record_id:
            record = await self.client.patch(f"/{self.resource}/{record_id}", body)
        else:
            record = await self.client.post(f"/{self.resource}", body)
        for key in self.cache.keys_matching(self.resource):
            self.cache.upsert_record(key, record)
        self.cache.set(self.detail_key(record["id"]), record)
        logger.debug(
            "resource_saved",
            resource=self.resource,
            record_id=record["id"],
            created=not record_id,
        )
        return record

    async def _remove(self, record_id: Any) -> None:
        await self.client.delete(f"/{self.resource}/{record_id}")
        for key in self.cache.keys_matching(self.resource):
            self.cache.remove_record(key, record_id)
        self.cache.remove(self.detail_key(record_id))
        logger.debug("resource_removed", resource=self.resource, record_id=record_id)
