"""Tests for ResourceList, ResourceMutator and the search debouncer."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
import pytest_asyncio
import respx

from portfolio_cms.client.api_client import PortfolioApiClient
from portfolio_cms.client.query_cache import InfiniteData, PageData, QueryCache
from portfolio_cms.client.resources import Debouncer, ResourceList, ResourceMutator

BASE_URL = "http://api.test/api/v1"


def _page(total, *ids):
    return {"total": total, "data": [{"id": i, "title": f"Project {i}"} for i in ids]}


@pytest_asyncio.fixture
async def api():
    async with PortfolioApiClient(BASE_URL, access_token="token", retry_backoff=0) as client:
        yield client


# ---------------------------------------------------------------------------
# Debouncer
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_debouncer_runs_only_the_last_call():
    calls = []
    debouncer = Debouncer(delay=0.01)
    first = debouncer.call(lambda: calls.append("first"))
    second = debouncer.call(lambda: calls.append("second"))
    assert debouncer.pending

    await second
    assert first.cancelled()
    assert calls == ["second"]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_debouncer_awaits_coroutines():
    async def work():
        return 42

    assert await Debouncer(delay=0).call(work) == 42


# ---------------------------------------------------------------------------
# ResourceList
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_fetch_pages_until_exhausted(api):
    cache = QueryCache()
    listing = ResourceList(api, cache, "projects", size=2, params={"featured": True})
    assert listing.has_next_page
    assert listing.count is None

    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get("/projects").mock(
            side_effect=[
                httpx.Response(200, json=_page(3, 1, 2)),
                httpx.Response(200, json=_page(3, 3)),
            ]
        )
        await listing.fetch_next_page()
        assert listing.has_next_page
        await listing.fetch_next_page()

    assert [item["id"] for item in listing.items] == [1, 2, 3]
    assert listing.count == 3
    assert not listing.has_next_page
    assert await listing.fetch_next_page() is None

    params = route.calls[1].request.url.params
    assert params["page"] == "2"
    assert params["size"] == "2"
    assert params["featured"] == "true"
    assert listing.query_key == ("projects", "", json.dumps({"featured": True}))
    assert cache.get(listing.query_key).page_params == [1, 2]


@pytest.mark.asyncio
async def test_refetch_reloads_loaded_pages(api):
    cache = QueryCache()
    listing = ResourceList(api, cache, "projects", size=2)
    with respx.mock(base_url=BASE_URL) as mock:
        mock.get("/projects").mock(
            side_effect=[
                httpx.Response(200, json=_page(2, 1, 2)),
                httpx.Response(200, json=_page(1, 2)),
            ]
        )
        await listing.fetch_next_page()
        await listing.refetch()

    assert [item["id"] for item in listing.items] == [2]
    assert listing.count == 1


@pytest.mark.asyncio
async def test_set_search_switches_query_key(api):
    cache = QueryCache()
    listing = ResourceList(api, cache, "projects", search_delay=0.01)
    listing.set_search("py")
    task = listing.set_search("python")
    assert listing.search == "python"
    assert listing.debounced_search == ""

    await task
    assert listing.debounced_search == "python"
    assert listing.query_key[1] == "python"

    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get("/projects").respond(200, json=_page(0))
        await listing.fetch_next_page()
    assert route.calls.last.request.url.params["search"] == "python"
    assert listing.count == 0


def test_change_count_adjusts_listing():
    cache = QueryCache()
    listing = ResourceList(PortfolioApiClient(BASE_URL), cache, "projects")
    cache.set(listing.query_key, InfiniteData(pages=[PageData(total=4)], page_params=[1]))
    listing.change_count(-1)
    assert listing.count == 3


# ---------------------------------------------------------------------------
# ResourceMutator
# ---------------------------------------------------------------------------
@pytest.fixture
def seeded_cache():
    cache = QueryCache()
    cache.set(
        ("projects", "", "null"),
        InfiniteData(pages=[PageData(**_page(2, "a", "b"))], page_params=[1]),
    )
    return cache


@pytest.mark.asyncio
async def test_save_without_id_posts_and_prepends(api, seeded_cache):
    mutator = ResourceMutator(api, seeded_cache, "projects", singular="project")
    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.post("/projects").respond(201, json={"id": "c", "title": "New"})
        record = await mutator.save({"title": "New"})

    assert json.loads(route.calls.last.request.content) == {"title": "New"}
    assert record["id"] == "c"
    assert [r["id"] for r in seeded_cache.flatten(("projects", "", "null"))] == ["c", "a", "b"]
    assert seeded_cache.count(("projects", "", "null")) == 3
    assert seeded_cache.get(("project", "detail", "c")) == record
    assert not mutator.mutating


@pytest.mark.asyncio
async def test_save_with_edit_patches_in_place(api, seeded_cache):
    mutator = ResourceMutator(api, seeded_cache, "projects", singular="project")
    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.patch("/projects/b").respond(200, json={"id": "b", "title": "Renamed"})
        await mutator.save({"edit": "b", "title": "Renamed"})

    assert json.loads(route.calls.last.request.content) == {"title": "Renamed"}
    items = seeded_cache.flatten(("projects", "", "null"))
    assert items[1] == {"id": "b", "title": "Renamed"}
    assert seeded_cache.count(("projects", "", "null")) == 2


@pytest.mark.asyncio
async def test_remove_drops_record_and_detail(api, seeded_cache):
    mutator = ResourceMutator(api, seeded_cache, "projects", singular="project")
    seeded_cache.set(("project", "detail", "a"), {"id": "a"})
    with respx.mock(base_url=BASE_URL) as mock:
        mock.delete("/projects/a").respond(200, json={"message": "Project deleted successfully"})
        await mutator.remove("a")

    assert [r["id"] for r in seeded_cache.flatten(("projects", "", "null"))] == ["b"]
    assert seeded_cache.count(("projects", "", "null")) == 1
    assert seeded_cache.get(("project", "detail", "a")) is None


@pytest.mark.asyncio
async def test_cancel_stops_inflight_mutation(seeded_cache):
    started = asyncio.Event()

    class SlowClient:
        async def post(self, endpoint, data):
            started.set()
            await asyncio.sleep(10)
            return {"id": "z"}

    mutator = ResourceMutator(SlowClient(), seeded_cache, "projects")
    task = asyncio.ensure_future(mutator.save({"title": "Slow"}))
    await started.wait()
    assert mutator.mutating
    mutator.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not mutator.mutating
    assert seeded_cache.count(("projects", "", "null")) == 2


@pytest.mark.asyncio
async def test_new_mutation_supersedes_inflight_one(seeded_cache):
    started = asyncio.Event()

    class SequencedClient:
        def __init__(self):
            self.calls = 0

        async def post(self, endpoint, data):
            self.calls += 1
            if self.calls == 1:
                started.set()
                await asyncio.sleep(10)
            return {"id": data["title"].lower(), "title": data["title"]}

    mutator = ResourceMutator(SequencedClient(), seeded_cache, "projects")
    first = asyncio.ensure_future(mutator.save({"title": "P1"}))
    await started.wait()
    second = asyncio.ensure_future(mutator.save({"title": "P2"}))
    results = await asyncio.gather(first, second, return_exceptions=True)

    assert isinstance(results[0], asyncio.CancelledError)
    assert results[1] == {"id": "p2", "title": "P2"}
    assert [r["id"] for r in seeded_cache.flatten(("projects", "", "null"))] == ["p2", "a", "b"]
    assert not mutator.mutating
