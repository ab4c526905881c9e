"""
City Explorer Backend — FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error mapping and
       lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn city_explorer.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────┐ ┌──────────┐  │
    │  │ Req ID   │→│  Logging        │→│ GZip │→│  CORS    │  │
    │  └──────────┘ └─────────────────┘ └──────┘ └──────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  /location  /weather  /yelp  /movies  /meetups  /trails  │
    │  /health                                                 │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ NotFound→404 │ Upstream→502 │ Store→500│
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Report missing upstream API keys (logged, not fatal)

    Shutdown:
    1. Close the shared upstream HTTP client
    2. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from city_explorer import __version__
from city_explorer.config import settings
from city_explorer.database import dispose_engine
from city_explorer.exceptions import (
    CityExplorerError,
    MalformedPayloadError,
    NotFoundError,
    StoreUnavailableError,
    UpstreamUnavailableError,
    ValidationError,
)
from city_explorer.middleware.logging import RequestLoggingMiddleware
from city_explorer.middleware.request_id import RequestIDMiddleware, request_id_var
from city_explorer.routes import health, listings, location, weather, yelp
from city_explorer.services.upstream import upstream_client

logger = logging.getLogger(__name__)

# Message returned for every 5xx; causes are logged, never echoed
GENERIC_ERROR_MESSAGE = "Sorry, something went wrong"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during app startup, before anything else logs.
    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every request/statement at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("City Explorer Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Endpoints whose keys are set still work; the rest answer 502
        logger.error("Configuration error: %s", str(e))

    logger.info(
        "Cache thresholds: weather=%d min, restaurants=%d min",
        settings.weather_max_age_minutes,
        settings.restaurant_max_age_minutes,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("City Explorer Backend shutting down...")
    await upstream_client.aclose()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        ValidationError           → 400 Bad Request
        NotFoundError             → 404 Not Found
        UpstreamUnavailableError  → 502 Bad Gateway
        MalformedPayloadError     → 502 Bad Gateway
        StoreUnavailableError     → 500 Internal Server Error
        CityExplorerError (base)  → 500 Internal Server Error
        Exception (fallback)      → 500 Internal Server Error

    Only 4xx responses carry the exception message. 5xx responses always say
    GENERIC_ERROR_MESSAGE; the real cause goes to the log with its context.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        logger.info("[%s] Not found: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(UpstreamUnavailableError)
    async def handle_upstream_unavailable(request: Request, exc: UpstreamUnavailableError):
        logger.error(
            "[%s] Upstream unavailable: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=502,
            content=_error_body("upstream_unavailable", GENERIC_ERROR_MESSAGE),
        )

    @app.exception_handler(MalformedPayloadError)
    async def handle_malformed_payload(request: Request, exc: MalformedPayloadError):
        logger.error(
            "[%s] Malformed upstream payload: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=502,
            content=_error_body("malformed_payload", GENERIC_ERROR_MESSAGE),
        )

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_error(request: Request, exc: StoreUnavailableError):
        logger.error(
            "[%s] Cache store error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(status_code=500, content=_error_body("server_error", GENERIC_ERROR_MESSAGE))

    @app.exception_handler(CityExplorerError)
    async def handle_app_error(request: Request, exc: CityExplorerError):
        logger.error(
            "[%s] Application error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(status_code=500, content=_error_body("server_error", GENERIC_ERROR_MESSAGE))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("internal_server_error", GENERIC_ERROR_MESSAGE),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="City Explorer API",
        description=(
            "Aggregates location, weather, restaurant, movie, meetup and trail data "
            "for a searched place. Location, weather and restaurant results are cached."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(location.router)
    app.include_router(weather.router)
    app.include_router(yelp.router)
    app.include_router(listings.router)
    app.include_router(health.router)

    return app


app = create_app()
