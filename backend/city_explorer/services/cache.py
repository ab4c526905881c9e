"""
City Explorer Backend — Cache Coordinator
===========================================

What:  The read-through cache engine shared by locations, weather and
       restaurants.
Why:   Each kind follows the same policy (serve fresh rows, otherwise purge
       and refetch); one engine parametrised by CacheKind replaces a
       hand-written copy per kind.
How:   resolve(kind, key, refresh):

    ┌────────────┐   miss    ┌─────────────┐    ┌────────────┐
    │  lookup    │──────────▶│  refresh()  │───▶│  insert    │──▶ fresh records
    └────────────┘           └─────────────┘    └────────────┘
          │ hit                     ▲
          ▼                         │
    oldest row age > threshold? ─yes─▶ purge (awaited) ──┘
          │ no
          ▼
    stored records, as-is

Ordering:
    Within one resolve, purge completes before refresh() starts, and the
    insert is issued only after refresh() returns.

Concurrent misses:
    Two requests that miss on the same (kind, key) at the same time would
    both refetch and both insert, leaving duplicate rows. The coordinator
    keeps a map of in-flight resolves covering the whole lookup, purge,
    refresh and insert sequence; a second caller awaits the first caller's
    future instead of starting its own lookup. This covers one process
    only. Separate workers can still race; locations are protected there by
    the unique search_query constraint.

No retries, no error suppression: anything refresh() or the store raises
reaches the caller unchanged.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from city_explorer.services.cache_base import CacheHit, CacheKind, CacheStore

logger = logging.getLogger(__name__)

RefreshFn = Callable[[], Awaitable[Sequence[BaseModel]]]


def epoch_millis() -> int:
    """Current wall-clock time in epoch milliseconds (the store's timestamp unit)."""
    return int(time.time() * 1000)


class CacheCoordinator:
    """
    Read-through/write-through cache over a CacheStore.

    The store is injected; the coordinator holds no connection state of its
    own, only the in-flight refresh map. One instance is shared by all
    requests in the process.
    """

    def __init__(self, store: CacheStore, clock: Optional[Callable[[], int]] = None):
        self.store = store
        self._clock = clock or epoch_millis
        self._inflight: Dict[Tuple[str, Any], "asyncio.Future[List[BaseModel]]"] = {}

    async def resolve(self, kind: CacheKind, key: Any, refresh: RefreshFn) -> List[BaseModel]:
        """
        Return the records of `kind` for `key`, from the store when fresh.

        Args:
            kind:    Which table and staleness policy to use.
            key:     Search string for locations, location id otherwise.
            refresh: Fetches and normalizes fresh records from upstream.
                     Not called on a fresh hit.

        Raises:
            UpstreamUnavailableError, MalformedPayloadError, NotFoundError:
                from refresh()
            StoreUnavailableError: from the store
        """
        inflight_key = (kind.name, key)
        pending = self._inflight.get(inflight_key)

        if pending is None:
            pending = asyncio.ensure_future(self._resolve(kind, key, refresh))
            self._inflight[inflight_key] = pending
            pending.add_done_callback(lambda done: self._forget(inflight_key, done))
        else:
            logger.debug("Joining in-flight resolve: %s[%s]", kind.name, key)

        # shield: a cancelled request must not cancel the resolve others await
        return await asyncio.shield(pending)

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    def _forget(self, inflight_key: Tuple[str, Any], done: "asyncio.Future[Any]") -> None:
        if self._inflight.get(inflight_key) is done:
            del self._inflight[inflight_key]
        # Mark the outcome as observed even if every awaiting request was cancelled
        if not done.cancelled():
            done.exception()

    async def _resolve(self, kind: CacheKind, key: Any, refresh: RefreshFn) -> List[BaseModel]:
        # At most one of these runs per (kind, key); lookup through insert is one unit
        lookup = await self.store.lookup(kind, key)

        if isinstance(lookup, CacheHit):
            age_ms = self._clock() - lookup.oldest_created_at
            if not kind.is_stale(age_ms):
                logger.debug(
                    "Cache hit: %s[%s] (%d rows, age %.1f min)",
                    kind.name, key, len(lookup.rows), age_ms / 60_000,
                )
                return lookup.records
            logger.info(
                "Cache stale: %s[%s] age %.1f min exceeds %d min",
                kind.name, key, age_ms / 60_000, kind.max_age_minutes,
            )
            return await self._refresh(kind, key, refresh, purge=True)

        logger.info("Cache miss: %s[%s]", kind.name, key)
        return await self._refresh(kind, key, refresh, purge=False)

    async def _refresh(
        self,
        kind: CacheKind,
        key: Any,
        refresh: RefreshFn,
        purge: bool,
    ) -> List[BaseModel]:
        if purge:
            removed = await self.store.purge(kind, key)
            logger.info("Purged %d stale %s rows for %s", removed, kind.name, key)

        records = list(await refresh())
        stored = await self.store.insert(kind, key, records, created_at=self._clock())

        logger.info("Cached %d %s rows for %s", len(stored), kind.name, key)
        return stored
