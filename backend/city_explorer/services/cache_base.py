"""
City Explorer Backend — Cache Contracts
=========================================

What:  The types shared by the cache coordinator and every cache store:
       CacheKind (per-kind configuration), CachedRecord (a stored row),
       CacheHit / CacheMiss (the result of a lookup), and the abstract
       CacheStore interface.
Why:   The coordinator branches on an explicit two-case lookup result and
       talks to storage only through CacheStore, so the SQL store and the
       in-memory test double are interchangeable.

Lifecycle of a cached row:
    created  → on a miss refresh, stamped with the retrieval time
    read     → on a hit, returned as stored (no renormalization)
    deleted  → wholesale for its key when the oldest row is stale
    updated  → never
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Type, Union

from pydantic import BaseModel

MILLIS_PER_MINUTE = 60_000


@dataclass(frozen=True)
class CacheKind:
    """
    Configuration for one cached data kind.

    Attributes:
        name:             Kind name used in logs and the in-flight key.
        model:            ORM model (table) holding rows of this kind.
        record_type:      Pydantic record type rows are read back as.
        key_column:       Column the cache key is matched against
                          (`search_query` for locations, `location_id` otherwise).
        max_age_minutes:  Staleness threshold; None means rows never expire.
        insert_or_ignore: A unique-key conflict on insert keeps the existing
                          row instead of failing (locations).
    """

    name: str
    model: Type[Any]
    record_type: Type[BaseModel]
    key_column: str
    max_age_minutes: Optional[int] = None
    insert_or_ignore: bool = False

    def is_stale(self, age_ms: int) -> bool:
        """Strictly older than the threshold. An age equal to it is still fresh."""
        if self.max_age_minutes is None:
            return False
        return age_ms > self.max_age_minutes * MILLIS_PER_MINUTE


@dataclass(frozen=True)
class CachedRecord:
    """A normalized record as stored, with its retrieval time and owner."""

    record: BaseModel
    created_at: int
    location_id: Optional[int] = None


@dataclass(frozen=True)
class CacheHit:
    """Lookup found at least one row for the key."""

    rows: Sequence[CachedRecord]

    @property
    def oldest_created_at(self) -> int:
        # A set is only as fresh as its oldest member
        return min(row.created_at for row in self.rows)

    @property
    def records(self) -> List[BaseModel]:
        return [row.record for row in self.rows]


@dataclass(frozen=True)
class CacheMiss:
    """Lookup found no rows for the key."""

    reason: str = field(default="empty")


CacheLookup = Union[CacheHit, CacheMiss]


class CacheStore(ABC):
    """
    Abstract persistent store for cached records, one table per kind.

    Implementations raise StoreUnavailableError for any storage failure.
    Each method completes (commits) before returning, so a caller that
    awaits purge() knows the rows are gone before it inserts new ones.
    """

    @abstractmethod
    async def lookup(self, kind: CacheKind, key: Any) -> CacheLookup:
        """All rows of `kind` whose key column equals `key`."""
        ...

    @abstractmethod
    async def insert(
        self,
        kind: CacheKind,
        key: Any,
        records: Sequence[BaseModel],
        created_at: int,
    ) -> List[BaseModel]:
        """
        Persist `records` under `key`, stamped with `created_at`.

        Returns the records as stored; for locations this includes the
        generated id that callers need for every follow-up request.
        """
        ...

    @abstractmethod
    async def get(self, kind: CacheKind, row_id: int) -> Optional[BaseModel]:
        """The stored record of `kind` with primary key `row_id`, or None."""
        ...

    @abstractmethod
    async def purge(self, kind: CacheKind, key: Any) -> int:
        """Delete every row of `kind` for `key`. Returns the number deleted."""
        ...
