"""
City Explorer Backend — SQL Cache Store
=========================================

What:  CacheStore implementation over async SQLAlchemy, one table per kind.
Why:   Cached data must survive restarts and be shared by every worker that
       points at the same database.
How:   Every operation opens its own session from the process-wide factory
       and commits before returning. There is no session-per-request: the
       coordinator's ordering guarantee (purge finishes before insert
       starts) relies on each call being durable on return.

Atomicity (known gap):
    purge() and the following insert() are separate transactions. A crash
    between them leaves no rows for that key; the next request sees a miss
    and refetches. This degraded state is accepted rather than wrapping
    upstream I/O inside an open transaction.

Error translation:
    SQLAlchemyError → StoreUnavailableError (details logged, not returned).
    IntegrityError on a kind with insert_or_ignore → existing rows returned.
"""

import logging
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from city_explorer.exceptions import StoreUnavailableError
from city_explorer.services.cache_base import (
    CachedRecord,
    CacheHit,
    CacheKind,
    CacheLookup,
    CacheMiss,
    CacheStore,
)

logger = logging.getLogger(__name__)


class SqlCacheStore(CacheStore):
    """Table-per-kind cache store backed by a SQLAlchemy async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def lookup(self, kind: CacheKind, key: Any) -> CacheLookup:
        column = getattr(kind.model, kind.key_column)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(kind.model).where(column == key).order_by(kind.model.id)
                )
                rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._store_error("lookup", kind, e)

        if not rows:
            return CacheMiss()
        return CacheHit(rows=[self._to_cached(kind, row) for row in rows])

    async def insert(
        self,
        kind: CacheKind,
        key: Any,
        records: Sequence[BaseModel],
        created_at: int,
    ) -> List[BaseModel]:
        rows = [self._to_row(kind, key, record, created_at) for record in records]
        if not rows:
            return []

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add_all(rows)
        except IntegrityError as e:
            if not kind.insert_or_ignore:
                raise self._store_error("insert", kind, e)
            # Another writer inserted the same key first; keep its row
            logger.info("%s[%s] already stored, keeping existing row", kind.name, key)
            existing = await self.lookup(kind, key)
            return existing.records if isinstance(existing, CacheHit) else []
        except SQLAlchemyError as e:
            raise self._store_error("insert", kind, e)

        # Primary keys were assigned on flush; expire_on_commit=False keeps them readable
        return [kind.record_type.model_validate(row) for row in rows]

    async def get(self, kind: CacheKind, row_id: int) -> Optional[BaseModel]:
        try:
            async with self._session_factory() as session:
                row = await session.get(kind.model, row_id)
        except SQLAlchemyError as e:
            raise self._store_error("get", kind, e)
        return kind.record_type.model_validate(row) if row is not None else None

    async def purge(self, kind: CacheKind, key: Any) -> int:
        column = getattr(kind.model, kind.key_column)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(delete(kind.model).where(column == key))
        except SQLAlchemyError as e:
            raise self._store_error("purge", kind, e)
        return result.rowcount or 0

    # ── Row Mapping ───────────────────────────────────────────────────────

    @staticmethod
    def _to_row(kind: CacheKind, key: Any, record: BaseModel, created_at: int) -> Any:
        values = record.model_dump(exclude={"id"})
        values[kind.key_column] = key
        values["created_at"] = created_at
        return kind.model(**values)

    @staticmethod
    def _to_cached(kind: CacheKind, row: Any) -> CachedRecord:
        return CachedRecord(
            record=kind.record_type.model_validate(row),
            created_at=row.created_at,
            location_id=getattr(row, "location_id", None),
        )

    @staticmethod
    def _store_error(operation: str, kind: CacheKind, error: Exception) -> StoreUnavailableError:
        logger.error(
            "Cache store %s failed for kind=%s: %s",
            operation,
            kind.name,
            str(error),
            exc_info=True,
        )
        return StoreUnavailableError(
            context={"operation": operation, "kind": kind.name, "error_type": type(error).__name__},
        )
