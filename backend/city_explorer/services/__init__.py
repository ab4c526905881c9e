# Services package init
"""
City Explorer Backend — Services Layer
========================================

What:  Business logic between routes (HTTP) and storage/upstream I/O.

Service Inventory:
    - upstream:         UpstreamClient contract + httpx implementation
    - providers:        per-API request builders (geocode, weather, yelp, ...)
    - normalizers:      pure payload → record reshaping
    - cache_base:       CacheKind, CacheHit/CacheMiss, CacheStore contract
    - cache_store:      SqlCacheStore (async SQLAlchemy)
    - cache:            CacheCoordinator (read-through engine)
    - cache_kinds:      location / weather / restaurant configurations
    - explorer_service: per-endpoint orchestration
"""
