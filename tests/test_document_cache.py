"""Tests for the bounded document cache and its single-flight fetch."""

import asyncio
import traceback

import pytest

from pkgdocs_mcp.docs.cache import DocumentCache
from pkgdocs_mcp.docs.errors import AllSourcesExhausted
from pkgdocs_mcp.docs.models import FailureKind, ResolutionKey, SectionLabel, SourceFailure


def _key(name: str) -> ResolutionKey:
    return ResolutionKey.build("npm", name)


def _doc(make_doc, name: str, body: str = "body", degraded: bool = False):
    return make_doc(_key(name), sections=[(SectionLabel.DESCRIPTION, "", body)], degraded=degraded)


def _exhausted(key: ResolutionKey) -> AllSourcesExhausted:
    return AllSourcesExhausted(key, [SourceFailure("npm_registry", FailureKind.NOT_FOUND, "404")])


def test_hit_and_miss_are_counted(clock, make_doc) -> None:
    cache = DocumentCache(capacity=4, clock=clock)
    doc = _doc(make_doc, "a")

    assert cache.get(_key("a")) is None
    cache.put(_key("a"), doc)
    assert cache.get(_key("a")) is doc

    stats = cache.stats()
    assert stats.hits == 1
    assert stats.misses == 1
    assert stats.entries == 1


def test_keys_differ_by_symbol_and_version(clock, make_doc) -> None:
    cache = DocumentCache(clock=clock)
    cache.put(ResolutionKey.build("npm", "a"), _doc(make_doc, "a"))

    assert cache.get(ResolutionKey.build("npm", "a", symbol="run")) is None
    assert cache.get(ResolutionKey.build("npm", "a", version="1.0.0")) is None
    assert cache.get(ResolutionKey.build("NPM", "a")) is not None


def test_expired_entry_is_never_returned(clock, make_doc) -> None:
    cache = DocumentCache(default_ttl_s=10, clock=clock)
    cache.put(_key("a"), _doc(make_doc, "a"))

    clock.advance(9.9)
    assert cache.get(_key("a")) is not None
    clock.advance(0.2)
    assert cache.get(_key("a")) is None
    assert _key("a") not in cache
    assert cache.stats().expirations == 1


def test_least_recently_used_is_evicted(clock, make_doc) -> None:
    cache = DocumentCache(capacity=2, clock=clock)
    cache.put(_key("a"), _doc(make_doc, "a"))
    cache.put(_key("b"), _doc(make_doc, "b"))
    cache.get(_key("a"))

    cache.put(_key("c"), _doc(make_doc, "c"))

    assert _key("a") in cache
    assert _key("b") not in cache
    assert _key("c") in cache
    assert cache.stats().evictions == 1


def test_expired_entries_go_before_live_ones(clock, make_doc) -> None:
    cache = DocumentCache(capacity=2, clock=clock)
    cache.put(_key("a"), _doc(make_doc, "a"), ttl_s=10)
    cache.put(_key("b"), _doc(make_doc, "b"), ttl_s=1000)
    # a is now most recently used, b is the LRU entry
    cache.get(_key("a"))
    clock.advance(20)

    cache.put(_key("c"), _doc(make_doc, "c"))

    assert _key("b") in cache
    assert _key("c") in cache
    assert len(cache) == 2
    assert cache.stats().evictions == 0


def test_byte_budget_evicts_oldest(clock, make_doc) -> None:
    cache = DocumentCache(capacity=10, max_bytes=30, clock=clock)
    cache.put(_key("a"), _doc(make_doc, "a", body="x" * 20))
    cache.put(_key("b"), _doc(make_doc, "b", body="y" * 20))

    assert _key("a") not in cache
    assert _key("b") in cache
    assert cache.stats().bytes == 20


def test_single_oversized_entry_is_kept(clock, make_doc) -> None:
    cache = DocumentCache(max_bytes=5, clock=clock)
    cache.put(_key("a"), _doc(make_doc, "a", body="z" * 50))

    assert _key("a") in cache


def test_negative_entry_raises_until_it_expires(clock) -> None:
    cache = DocumentCache(negative_ttl_s=60, clock=clock)
    failure = _exhausted(_key("ghost"))
    cache.put_failure(_key("ghost"), failure)

    with pytest.raises(AllSourcesExhausted) as exc_info:
        cache.get(_key("ghost"))
    assert exc_info.value is failure
    assert cache.stats().negative_entries == 1

    clock.advance(61)
    assert cache.get(_key("ghost")) is None


@pytest.mark.asyncio
async def test_repeated_negative_hits_do_not_grow_the_traceback(clock) -> None:
    cache = DocumentCache(negative_ttl_s=60, clock=clock)
    key = _key("ghost")
    cache.put_failure(key, _exhausted(key))

    async def fetch():
        raise AssertionError("negative entry should answer")

    depths = []
    for _ in range(5):
        with pytest.raises(AllSourcesExhausted) as exc_info:
            cache.get(key)
        depths.append(len(list(traceback.walk_tb(exc_info.value.__traceback__))))
    for _ in range(5):
        with pytest.raises(AllSourcesExhausted) as exc_info:
            await cache.get_or_fetch(key, fetch)
        depths.append(len(list(traceback.walk_tb(exc_info.value.__traceback__))))

    assert len(set(depths[:5])) == 1
    assert len(set(depths[5:])) == 1


def test_degraded_document_uses_negative_ttl(clock, make_doc) -> None:
    cache = DocumentCache(default_ttl_s=3600, negative_ttl_s=30, clock=clock)
    cache.put(_key("thin"), _doc(make_doc, "thin", degraded=True))

    clock.advance(31)

    assert cache.get(_key("thin")) is None


def test_invalidate_and_clear(clock, make_doc) -> None:
    cache = DocumentCache(clock=clock)
    cache.put(_key("a"), _doc(make_doc, "a"))
    cache.put(_key("b"), _doc(make_doc, "b"))

    assert cache.invalidate(_key("a")) is True
    assert cache.invalidate(_key("a")) is False
    cache.clear()

    assert len(cache) == 0
    assert cache.stats().bytes == 0


def test_sweep_removes_expired(clock, make_doc) -> None:
    cache = DocumentCache(clock=clock)
    cache.put(_key("a"), _doc(make_doc, "a"), ttl_s=5)
    cache.put(_key("b"), _doc(make_doc, "b"), ttl_s=50)
    clock.advance(10)

    assert cache.sweep() == 1
    assert len(cache) == 1


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        DocumentCache(capacity=0)


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch(make_doc) -> None:
    cache = DocumentCache()
    key = _key("shared")
    doc = _doc(make_doc, "shared")
    release = asyncio.Event()
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        await release.wait()
        return doc

    waiters = [asyncio.ensure_future(cache.get_or_fetch(key, fetch)) for _ in range(5)]
    await asyncio.sleep(0)
    assert cache.stats().in_flight == 1
    release.set()
    results = await asyncio.gather(*waiters)

    assert calls == 1
    assert all(result is doc for result in results)
    stats = cache.stats()
    assert stats.coalesced == 4
    assert stats.in_flight == 0
    assert cache.get(key) is doc


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_failure() -> None:
    cache = DocumentCache(negative_ttl_s=60)
    key = _key("ghost")
    release = asyncio.Event()
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        await release.wait()
        raise _exhausted(key)

    waiters = [asyncio.ensure_future(cache.get_or_fetch(key, fetch)) for _ in range(3)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*waiters, return_exceptions=True)

    assert calls == 1
    assert all(isinstance(r, AllSourcesExhausted) for r in results)
    assert results[0] is results[1] is results[2]

    # Cached negative result fails fast without a new fetch
    with pytest.raises(AllSourcesExhausted):
        await cache.get_or_fetch(key, fetch)
    assert calls == 1


@pytest.mark.asyncio
async def test_unexpected_error_is_shared_but_not_cached(make_doc) -> None:
    cache = DocumentCache()
    key = _key("flaky")
    attempts = 0

    async def fetch():
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("transient")
        return _doc(make_doc, "flaky")

    with pytest.raises(RuntimeError):
        await cache.get_or_fetch(key, fetch)

    doc = await cache.get_or_fetch(key, fetch)
    assert doc.key == key
    assert attempts == 2


@pytest.mark.asyncio
async def test_waiter_timeout_does_not_cancel_fetch(make_doc) -> None:
    cache = DocumentCache()
    key = _key("slow")
    doc = _doc(make_doc, "slow")
    release = asyncio.Event()
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        await release.wait()
        return doc

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(cache.get_or_fetch(key, fetch), timeout=0.05)

    assert cache.stats().in_flight == 1
    release.set()
    result = await cache.get_or_fetch(key, fetch)

    assert result is doc
    assert calls == 1


@pytest.mark.asyncio
async def test_stats_to_dict_reports_configuration() -> None:
    cache = DocumentCache(capacity=8, max_bytes=1024)

    data = cache.stats().to_dict()

    assert data["capacity"] == 8
    assert data["max_bytes"] == 1024
    assert data["entries"] == 0
