"""Tests for the in-memory paginated query cache."""

from __future__ import annotations

import pytest

from portfolio_cms.client.query_cache import InfiniteData, PageData, QueryCache

KEY = ("projects", "", "null")


@pytest.fixture
def cache() -> QueryCache:
    cache = QueryCache()
    cache.set(
        KEY,
        InfiniteData(
            pages=[
                PageData(total=5, data=[{"id": 1}, {"id": 2}]),
                PageData(total=5, data=[{"id": 3}, {"id": 4}]),
            ],
            page_params=[1, 2],
        ),
    )
    return cache


def test_flatten_and_count(cache):
    assert [r["id"] for r in cache.flatten(KEY)] == [1, 2, 3, 4]
    assert cache.count(KEY) == 5


def test_missing_key_reads():
    cache = QueryCache()
    assert cache.flatten(KEY) == []
    assert cache.count(KEY) is None
    assert cache.next_page_param(KEY) == 1


def test_next_page_param(cache):
    assert cache.next_page_param(KEY) == 3
    cache.get(KEY).pages.append(PageData(total=5, data=[{"id": 5}]))
    assert cache.next_page_param(KEY) is None


def test_upsert_replaces_existing_record(cache):
    cache.upsert_record(KEY, {"id": 3, "title": "updated"})
    assert cache.flatten(KEY)[2] == {"id": 3, "title": "updated"}
    assert cache.count(KEY) == 5


def test_upsert_prepends_new_record_to_last_page(cache):
    cache.upsert_record(KEY, {"id": 9})
    last = cache.get(KEY).pages[-1]
    assert last.data[0] == {"id": 9}
    assert last.total == 6


def test_upsert_ignores_unloaded_keys():
    cache = QueryCache()
    cache.upsert_record(KEY, {"id": 1})
    assert cache.get(KEY) is None

    cache.set(KEY, InfiniteData())
    cache.upsert_record(KEY, {"id": 1})
    assert cache.flatten(KEY) == []


def test_remove_record_decrements_every_page(cache):
    cache.remove_record(KEY, 2)
    assert [r["id"] for r in cache.flatten(KEY)] == [1, 3, 4]
    assert [p.total for p in cache.get(KEY).pages] == [4, 4]


def test_change_count(cache):
    cache.change_count(KEY, 2)
    assert [p.total for p in cache.get(KEY).pages] == [7, 7]


def test_keys_matching_by_element(cache):
    cache.set(("project", "detail", 1), {"id": 1})
    cache.set(("skills", "", "null"), InfiniteData())
    assert cache.keys_matching("projects") == [KEY]
    assert set(cache.keys()) == {KEY, ("project", "detail", 1), ("skills", "", "null")}

    cache.remove(("project", "detail", 1))
    assert cache.get(("project", "detail", 1)) is None
