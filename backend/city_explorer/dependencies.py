"""
City Explorer Backend — Service Wiring
========================================

What:  Builds the process-wide service graph and exposes it to FastAPI.
Why:   The coordinator's in-flight refresh map and the httpx connection pool
       must be shared by every request, so they are created once here.
       Routes receive the service through Depends(get_explorer_service),
       which tests override with `app.dependency_overrides`.
"""

from city_explorer.database import async_session_factory
from city_explorer.services.cache import CacheCoordinator
from city_explorer.services.cache_store import SqlCacheStore
from city_explorer.services.explorer_service import ExplorerService
from city_explorer.services.upstream import upstream_client

cache_store = SqlCacheStore(async_session_factory)
cache_coordinator = CacheCoordinator(cache_store)
explorer_service = ExplorerService(coordinator=cache_coordinator, upstream=upstream_client)


def get_explorer_service() -> ExplorerService:
    return explorer_service
