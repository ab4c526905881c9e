# Middleware package init
"""
City Explorer Backend — Middleware Package
============================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation ID
    2. Access Log: method, path, status, duration, tagged with the request ID
    3. GZip: compresses larger JSON lists (forecasts, listings)
    4. CORS: FastAPI's CORSMiddleware (the browser frontend is cross-origin)
"""
