"""
City Explorer Backend — Application Package Initializer
========================================================

What: Marks the `city_explorer` directory as a Python package.
Why:  Enables module imports like `from city_explorer.config import settings`.
Who:  Used by Alembic, pytest, and uvicorn (`uvicorn city_explorer.main:app`).

Architecture Note:
    The backend is a caching proxy in front of third-party location APIs:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   ExplorerService (Orchestration)   │  ← identity resolution, per-kind calls
    ├─────────────────────────────────────┤
    │   CacheCoordinator │ Normalizers    │  ← read-through cache, reshaping
    ├─────────────────────────────────────┤
    │   CacheStore (SQL) │ UpstreamClient │  ← persistence, outbound HTTP
    └─────────────────────────────────────┘

    Location, weather and restaurant results are cached per location.
    Movies, meetups and trails are fetched on every request.
"""

__version__ = "1.0.0"
