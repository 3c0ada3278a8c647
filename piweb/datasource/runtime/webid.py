"""WebID resolution with a time-evicted cache.

Architecture:
    - WebIDCache: (lookup kind, path) -> WebIDCacheEntry table guarded by an
      asyncio.Lock.
      Entries older than the TTL are never served.
    - EvictionTimer: one background task per datasource instance that clears
      the whole table on a fixed period until it is stopped.
    - WebIDResolver: cache-first lookup; on a miss issues one GET against
      ``/points`` or ``/attributes`` (``/elements`` via ``lookup``).

The lock is held only for table operations, never across network I/O, so two
concurrent misses for the same path may both hit the network; the later
insert wins.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Protocol

from ..config import WEBID_CACHE_TTL_SECONDS, WEBID_EVICTION_INTERVAL_SECONDS
from ..core.enums import LookupKind
from ..core.exceptions import ResolutionError, TransportError
from .telemetry import log_cache_evicted


CacheKey = tuple[LookupKind, str]


class GetTransport(Protocol):
    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any: ...


@dataclass(frozen=True)
class WebIDCacheEntry:
    web_id: str
    created_at: float
    name: str = ""
    type: str = ""


class WebIDCache:
    """(lookup kind, path) to WebID table with TTL-checked reads.

    The same path may name a point and an attribute, so the collection it was
    resolved against is part of the key.
    """

    def __init__(
        self,
        ttl: float = WEBID_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, WebIDCacheEntry] = {}
        self._lock = asyncio.Lock()

    def now(self) -> float:
        return self._clock()

    def is_expired(self, entry: WebIDCacheEntry) -> bool:
        return self._clock() - entry.created_at >= self.ttl

    async def get(self, key: CacheKey) -> WebIDCacheEntry | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self.is_expired(entry):
                del self._entries[key]
                return None
            return entry

    async def put(self, key: CacheKey, entry: WebIDCacheEntry) -> None:
        async with self._lock:
            self._entries[key] = entry

    async def clear(self) -> int:
        """Remove every entry; returns how many were dropped."""
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class EvictionTimer:
    """Recurring cache sweep owned by a datasource instance."""

    def __init__(self, cache: WebIDCache, interval: float = WEBID_EVICTION_INTERVAL_SECONDS) -> None:
        self._cache = cache
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop on the running event loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="webid-cache-eviction")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def sweep(self) -> int:
        evicted = await self._cache.clear()
        log_cache_evicted(entries=evicted)
        return evicted

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.sweep()


class WebIDResolver:
    """Resolves hierarchical paths to WebIDs through the cache."""

    def __init__(self, transport: GetTransport, cache: WebIDCache | None = None) -> None:
        self._transport = transport
        self.cache = cache or WebIDCache()

    async def resolve(self, full_path: str, is_pi_point: bool) -> WebIDCacheEntry:
        """Resolve a point path (``\\\\server\\tag``) or attribute path (``...|attr``).

        Raises:
            ResolutionError: If the lookup failed or returned no WebId
        """
        return await self.lookup(full_path, LookupKind.for_target(is_pi_point))

    async def lookup(self, path: str, kind: LookupKind) -> WebIDCacheEntry:
        key = (kind, path)
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        try:
            data = await self._transport.get(kind.path, params={"path": path})
        except TransportError as e:
            raise ResolutionError(
                f"Could not resolve WebID for {path}: {e}",
                path=path,
                status_code=e.status_code,
            ) from e

        web_id = data.get("WebId") if isinstance(data, dict) else None
        if not isinstance(web_id, str) or not web_id:
            raise ResolutionError(f"No WebId returned for {path}", path=path)

        entry = WebIDCacheEntry(
            web_id=web_id,
            created_at=self.cache.now(),
            name=str(data.get("Name") or ""),
            type=str(data.get("PointType") or data.get("Type") or ""),
        )
        await self.cache.put(key, entry)
        return entry
