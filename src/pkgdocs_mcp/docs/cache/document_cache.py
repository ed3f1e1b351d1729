"""Bounded in-memory document cache with TTL, LRU eviction and single-flight.

Entries hold either a StructuredDocument or a negative result (an
``AllSourcesExhausted`` failure). Recency is tracked by an OrderedDict:
the first item is the least recently used.

Locking: a ``threading.Lock`` guards the entry map and the in-flight map.
It is only held for plain dictionary work and is never held across an
``await``.
"""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass
import logging
from threading import Lock
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Union

from pkgdocs_mcp.docs.errors import AllSourcesExhausted
from pkgdocs_mcp.docs.models import ResolutionKey, StructuredDocument

logger = logging.getLogger("pkgdocs-mcp.cache")

CachedValue = Union[StructuredDocument, AllSourcesExhausted]
FetchFn = Callable[[], Awaitable[StructuredDocument]]

# Rough size charged for a negative entry
NEGATIVE_ENTRY_SIZE = 256


@dataclass
class CacheEntry:
    value: CachedValue
    expires_at: float
    last_access_at: float
    size_estimate: int

    @property
    def is_negative(self) -> bool:
        return isinstance(self.value, AllSourcesExhausted)


@dataclass
class InFlightRequest:
    """A fetch in progress; every caller for the key awaits ``future``."""

    key: ResolutionKey
    future: "asyncio.Future[StructuredDocument]"
    waiters: int = 0


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    evictions: int = 0
    expirations: int = 0
    entries: int = 0
    negative_entries: int = 0
    in_flight: int = 0
    bytes: int = 0
    capacity: int = 0
    max_bytes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class _Counters:
    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    evictions: int = 0
    expirations: int = 0


class DocumentCache:
    """Key -> document cache bounded by entry count and optional byte budget.

    Usage:
        >>> cache = DocumentCache(capacity=128, default_ttl_s=3600, negative_ttl_s=60)
        >>> doc = await cache.get_or_fetch(key, lambda: resolver_fetch(key))
        >>> cache.stats().hits
        0
    """

    def __init__(
        self,
        capacity: int = 256,
        max_bytes: int = 0,
        default_ttl_s: float = 3600.0,
        negative_ttl_s: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.max_bytes = max_bytes
        self.default_ttl_s = default_ttl_s
        self.negative_ttl_s = negative_ttl_s
        self._clock = clock

        self._entries: "OrderedDict[ResolutionKey, CacheEntry]" = OrderedDict()
        self._in_flight: Dict[ResolutionKey, InFlightRequest] = {}
        self._bytes = 0
        self._counters = _Counters()
        self._lock = Lock()
        self._tasks: Set["asyncio.Task[None]"] = set()

    # ------------------------------------------------------------------
    # Plain cache operations
    # ------------------------------------------------------------------

    def get(self, key: ResolutionKey) -> Optional[StructuredDocument]:
        """Return the cached document, or None on a miss.

        Expired entries are never returned. A hit marks the entry as most
        recently used.

        Raises:
            AllSourcesExhausted: If a negative result is cached for ``key``
        """
        with self._lock:
            entry = self._lookup_locked(key)
        if entry is None:
            return None
        if isinstance(entry.value, AllSourcesExhausted):
            raise entry.value.with_traceback(None)
        return entry.value

    def put(self, key: ResolutionKey, document: StructuredDocument, ttl_s: Optional[float] = None) -> None:
        """Insert or replace a document.

        The TTL defaults to the document TTL, or the negative TTL for a
        degraded document.
        """
        if ttl_s is None:
            ttl_s = self.negative_ttl_s if document.degraded else self.default_ttl_s
        with self._lock:
            self._store_locked(key, document, ttl_s, document.size_estimate())

    def put_failure(self, key: ResolutionKey, failure: AllSourcesExhausted, ttl_s: Optional[float] = None) -> None:
        """Cache a negative result so repeated lookups fail fast."""
        if ttl_s is None:
            ttl_s = self.negative_ttl_s
        with self._lock:
            self._store_locked(key, failure, ttl_s, NEGATIVE_ENTRY_SIZE)

    def invalidate(self, key: ResolutionKey) -> bool:
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is None:
                return False
            self._bytes -= entry.size_estimate
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._bytes = 0

    def sweep(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        with self._lock:
            return self._remove_expired_locked(self._clock())

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._counters.hits,
                misses=self._counters.misses,
                coalesced=self._counters.coalesced,
                evictions=self._counters.evictions,
                expirations=self._counters.expirations,
                entries=len(self._entries),
                negative_entries=sum(1 for e in self._entries.values() if e.is_negative),
                in_flight=len(self._in_flight),
                bytes=self._bytes,
                capacity=self.capacity,
                max_bytes=self.max_bytes,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: ResolutionKey) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry.expires_at > self._clock()

    # ------------------------------------------------------------------
    # Single-flight
    # ------------------------------------------------------------------

    async def get_or_fetch(self, key: ResolutionKey, fetch_fn: FetchFn) -> StructuredDocument:
        """Return the cached document or fetch it, coalescing concurrent callers.

        - cached document: returned immediately
        - cached negative result: its failure is raised
        - fetch already in flight: the caller awaits the same outcome
        - otherwise the fetch starts in its own task and every waiter gets
          the same document or the same exception

        Waiters are shielded, so a caller that is cancelled or times out
        does not cancel the shared fetch; its result still populates the
        cache.

        Raises:
            AllSourcesExhausted: If every source failed (now or recently)
        """
        with self._lock:
            entry = self._lookup_locked(key)
            if entry is not None:
                if isinstance(entry.value, AllSourcesExhausted):
                    raise entry.value.with_traceback(None)
                return entry.value

            request = self._in_flight.get(key)
            start = request is None
            if start:
                request = InFlightRequest(key=key, future=asyncio.get_running_loop().create_future())
                self._in_flight[key] = request
            else:
                self._counters.coalesced += 1
            request.waiters += 1

        if start:
            logger.debug("Starting fetch for %s", key.describe())
            task = asyncio.create_task(self._run_fetch(request, fetch_fn))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            logger.debug("Joining in-flight fetch for %s", key.describe())

        try:
            return await asyncio.shield(request.future)
        finally:
            with self._lock:
                request.waiters -= 1

    async def _run_fetch(self, request: InFlightRequest, fetch_fn: FetchFn) -> None:
        future = request.future
        try:
            document = await fetch_fn()
        except AllSourcesExhausted as exc:
            with self._lock:
                if self.negative_ttl_s > 0:
                    self._store_locked(request.key, exc, self.negative_ttl_s, NEGATIVE_ENTRY_SIZE)
                self._in_flight.pop(request.key, None)
            self._settle(future, exc=exc)
        except asyncio.CancelledError:
            with self._lock:
                self._in_flight.pop(request.key, None)
            if not future.done():
                future.cancel()
            raise
        except Exception as exc:
            logger.warning("Fetch for %s failed unexpectedly: %r", request.key.describe(), exc)
            with self._lock:
                self._in_flight.pop(request.key, None)
            self._settle(future, exc=exc)
        else:
            ttl_s = self.negative_ttl_s if document.degraded else self.default_ttl_s
            with self._lock:
                if ttl_s > 0:
                    self._store_locked(request.key, document, ttl_s, document.size_estimate())
                self._in_flight.pop(request.key, None)
            self._settle(future, document=document)

    @staticmethod
    def _settle(future: "asyncio.Future[StructuredDocument]", document=None, exc=None) -> None:
        if future.done():
            return
        if exc is not None:
            future.set_exception(exc)
            # Mark retrieved in case every waiter already left
            future.exception()
        else:
            future.set_result(document)

    # ------------------------------------------------------------------
    # Locked helpers (caller holds self._lock)
    # ------------------------------------------------------------------

    def _lookup_locked(self, key: ResolutionKey) -> Optional[CacheEntry]:
        now = self._clock()
        entry = self._entries.get(key)
        if entry is None:
            self._counters.misses += 1
            return None
        if entry.expires_at <= now:
            self._drop_locked(key)
            self._counters.expirations += 1
            self._counters.misses += 1
            return None
        entry.last_access_at = now
        self._entries.move_to_end(key)
        self._counters.hits += 1
        return entry

    def _store_locked(self, key: ResolutionKey, value: CachedValue, ttl_s: float, size: int) -> None:
        now = self._clock()
        if key in self._entries:
            self._drop_locked(key)
        self._entries[key] = CacheEntry(
            value=value,
            expires_at=now + ttl_s,
            last_access_at=now,
            size_estimate=size,
        )
        self._bytes += size
        if self._over_budget():
            self._remove_expired_locked(now)
        while self._over_budget() and len(self._entries) > 1:
            evicted_key, evicted = self._entries.popitem(last=False)
            self._bytes -= evicted.size_estimate
            self._counters.evictions += 1
            logger.debug("Evicted %s", evicted_key.describe())

    def _over_budget(self) -> bool:
        if len(self._entries) > self.capacity:
            return True
        return self.max_bytes > 0 and self._bytes > self.max_bytes

    def _remove_expired_locked(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in expired:
            self._drop_locked(key)
        self._counters.expirations += len(expired)
        return len(expired)

    def _drop_locked(self, key: ResolutionKey) -> None:
        entry = self._entries.pop(key)
        self._bytes -= entry.size_estimate
