"""
City Explorer Backend — Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures and test doubles for the entire suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Test Doubles:
    InMemoryCacheStore  CacheStore kept in a dict; counts every call
    FakeUpstream        UpstreamClient answering canned payloads per provider
    FakeClock           Epoch-millis clock the test moves by hand

Fixture Hierarchy (all function-scoped):
    ├── clock:          FakeClock starting at a fixed instant
    ├── memory_store:   empty InMemoryCacheStore
    ├── upstream:       FakeUpstream preloaded with happy-path payloads
    ├── sqlite_store:   SqlCacheStore over a fresh aiosqlite database
    ├── explorer:       ExplorerService over sqlite_store + upstream + clock
    └── test_client:    HTTPX AsyncClient against the FastAPI app, with
                        get_explorer_service overridden to `explorer`
"""

import os
import tempfile
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

# Override settings for testing BEFORE any city_explorer imports
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="city_explorer_test_"), "health.db")
)
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["WEATHER_MAX_AGE_MINUTES"] = "30"
os.environ["RESTAURANT_MAX_AGE_MINUTES"] = "30"
for _name in ("GEOCODE", "WEATHER", "YELP", "MOVIEDB", "MEETUPS", "TRAILS"):
    os.environ[f"{_name}_API_KEY"] = "test-key-not-real"

# Display dates are rendered in local time; pin it so expected strings are stable
os.environ["TZ"] = "UTC"
if hasattr(time, "tzset"):
    time.tzset()

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from pydantic import BaseModel  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from city_explorer.database import Base, build_engine  # noqa: E402
from city_explorer.models.location import Location  # noqa: E402,F401
from city_explorer.models.restaurant import Restaurant  # noqa: E402,F401
from city_explorer.models.weather import Weather  # noqa: E402,F401
from city_explorer.services.cache import CacheCoordinator  # noqa: E402
from city_explorer.services.cache_base import (  # noqa: E402
    CachedRecord,
    CacheHit,
    CacheKind,
    CacheLookup,
    CacheMiss,
    CacheStore,
)
from city_explorer.services.cache_store import SqlCacheStore  # noqa: E402
from city_explorer.services.explorer_service import ExplorerService  # noqa: E402
from city_explorer.services.upstream import UpstreamClient  # noqa: E402

# 2024-01-15 12:00:00 UTC
START_MILLIS = 1_705_320_000_000


# ══════════════════════════════════════════════════════════════════════════
# Canned Upstream Payloads
# ══════════════════════════════════════════════════════════════════════════

SEATTLE_GEOCODE = {
    "status": "OK",
    "results": [
        {
            "formatted_address": "Seattle, WA, USA",
            "geometry": {"location": {"lat": 47.6062095, "lng": -122.3320708}},
        }
    ],
}

FORECAST = {
    "daily": {
        "data": [
            {"time": 1705320000, "summary": "Light rain in the morning."},
            {"time": 1705406400, "summary": "Overcast throughout the day."},
        ]
    }
}

YELP_SEARCH = {
    "businesses": [
        {
            "name": "Pike Place Chowder",
            "image_url": "https://s3-media.fl.yelpcdn.com/bphoto/chowder.jpg",
            "price": "$$",
            "rating": 4.5,
            "url": "https://www.yelp.com/biz/pike-place-chowder-seattle",
        },
        {"name": "Unrated Diner", "url": "https://www.yelp.com/biz/unrated-diner"},
    ]
}

TMDB_SEARCH = {
    "results": [
        {
            "title": "Sleepless in Seattle",
            "overview": "A recently widowed man's son calls a radio talk-show.",
            "vote_average": 6.6,
            "vote_count": 1800,
            "poster_path": "/afkYP15OeUOD0tFEmj6VvejuOcz.jpg",
            "popularity": 14.2,
            "release_date": "1993-06-24",
        }
    ]
}

MEETUP_EVENTS = {
    "events": [
        {
            "link": "https://www.meetup.com/seattle-python/events/1/",
            "name": "Monthly Python Night",
            "created": 1_700_000_000_000,
            "group": {"name": "Seattle Python Users"},
        }
    ]
}

HIKING_TRAILS = {
    "trails": [
        {
            "url": "https://www.hikingproject.com/trail/7011192",
            "name": "Rattlesnake Ledge",
            "location": "North Bend, Washington",
            "length": 4.3,
            "stars": 4.4,
            "starVotes": 84,
            "summary": "A popular hike to a stunning view.",
            "conditionStatus": "All Clear",
            "conditionDate": "2018-07-21 20:58:52",
        }
    ]
}


def default_payloads() -> Dict[str, Any]:
    return {
        "geocode": SEATTLE_GEOCODE,
        "weather": FORECAST,
        "yelp": YELP_SEARCH,
        "moviedb": TMDB_SEARCH,
        "meetups": MEETUP_EVENTS,
        "trails": HIKING_TRAILS,
    }


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class FakeClock:
    """Callable epoch-millis clock; tests advance it explicitly."""

    def __init__(self, now: int = START_MILLIS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance_minutes(self, minutes: float) -> None:
        self.now += int(minutes * 60_000)


class FakeUpstream(UpstreamClient):
    """
    Answers fetch() from a provider → payload map.

    A value that is an exception instance is raised instead of returned.
    Every call is recorded as (provider, url, params, headers).
    """

    def __init__(self, payloads: Optional[Dict[str, Any]] = None):
        self.payloads: Dict[str, Any] = payloads if payloads is not None else default_payloads()
        self.calls: List[tuple] = []

    async def fetch(
        self,
        url: str,
        *,
        provider: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        self.calls.append((provider, url, dict(params or {}), dict(headers or {})))
        result = self.payloads[provider]
        if isinstance(result, Exception):
            raise result
        return result

    def count(self, provider: str) -> int:
        return sum(1 for call in self.calls if call[0] == provider)


class InMemoryCacheStore(CacheStore):
    """
    Dict-backed CacheStore with the same observable contract as SqlCacheStore.

    Rows get sequential ids per kind. Call counters let tests assert how the
    coordinator used the store.
    """

    def __init__(self):
        self.rows: Dict[tuple, List[CachedRecord]] = {}
        self._next_id: Dict[str, int] = {}
        self.lookups = 0
        self.inserts = 0
        self.purges = 0

    async def lookup(self, kind: CacheKind, key: Any) -> CacheLookup:
        self.lookups += 1
        rows = self.rows.get((kind.name, key))
        if not rows:
            return CacheMiss()
        return CacheHit(rows=list(rows))

    async def insert(
        self,
        kind: CacheKind,
        key: Any,
        records: Sequence[BaseModel],
        created_at: int,
    ) -> List[BaseModel]:
        self.inserts += 1
        if kind.insert_or_ignore and self.rows.get((kind.name, key)):
            return [row.record for row in self.rows[(kind.name, key)]]

        stored = []
        for record in records:
            row_id = self._next_id.get(kind.name, 1)
            self._next_id[kind.name] = row_id + 1
            if "id" in type(record).model_fields:
                record = record.model_copy(update={"id": row_id})
            location_id = key if kind.key_column == "location_id" else None
            self.rows.setdefault((kind.name, key), []).append(
                CachedRecord(record=record, created_at=created_at, location_id=location_id)
            )
            stored.append(record)
        return stored

    async def get(self, kind: CacheKind, row_id: int) -> Optional[BaseModel]:
        for (kind_name, _), rows in self.rows.items():
            if kind_name != kind.name:
                continue
            for row in rows:
                if getattr(row.record, "id", None) == row_id:
                    return row.record
        return None

    async def purge(self, kind: CacheKind, key: Any) -> int:
        self.purges += 1
        return len(self.rows.pop((kind.name, key), []))

    def seed(self, kind: CacheKind, key: Any, records: Sequence[BaseModel], created_at: int) -> None:
        self.rows.setdefault((kind.name, key), []).extend(
            CachedRecord(record=r, created_at=created_at) for r in records
        )


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return InMemoryCacheStore()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path):
    """
    A fresh SQLite database with the cache tables created.

    SQLite ignores foreign keys unless asked; the pragma makes it reject
    orphaned weather/restaurant rows the way PostgreSQL does.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine):
    return SqlCacheStore(async_sessionmaker(sqlite_engine, expire_on_commit=False))


@pytest.fixture
def explorer(sqlite_store, upstream, clock):
    return ExplorerService(
        coordinator=CacheCoordinator(sqlite_store, clock=clock),
        upstream=upstream,
    )


@pytest_asyncio.fixture
async def test_client(explorer):
    """
    HTTPX AsyncClient routed straight to the FastAPI app.

    Usage:
        async def test_location(test_client):
            response = await test_client.get("/location", params={"data": "Seattle"})
    """
    from city_explorer.dependencies import get_explorer_service
    from city_explorer.main import app

    app.dependency_overrides[get_explorer_service] = lambda: explorer
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
