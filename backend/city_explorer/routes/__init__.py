# Routes package init
"""
City Explorer Backend — API Routes Package
============================================

Route Inventory:
    - location.py:  GET /location   (resolve or create a location identity)
    - weather.py:   GET /weather    (cached daily forecast)
    - yelp.py:      GET /yelp       (cached nearby restaurants)
    - listings.py:  GET /movies, GET /meetups, GET /trails (uncached)
    - health.py:    GET /health     (service health check)
    - params.py:    the shared `data` query parameter parser

Design Principle:
    Routes are THIN: parse `data`, call ExplorerService, return records.
    Errors propagate to the global handlers in main.py.
"""
