"""
WayShare Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn wayshare.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐       │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │       │
    │  └──────────────┘ └──────────┘ └─────────────────┘       │
    │                                                          │
    │  Routes (one generated router per entity):               │
    │  /api/profiles  /api/members   /api/rides                │
    │  /api/ride-requests  /api/notifications                  │
    │  /api/messages  /api/ratings   /health                   │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ EntityRequest→400/404 │ Validation→400 │ DB→500    │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration, log startup
    Shutdown: dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from wayshare import __version__
from wayshare.config import settings
from wayshare.database import dispose_engine
from wayshare.entities import ENTITIES, entity_for_path
from wayshare.exceptions import (
    DatabaseError,
    EntityRequestError,
    ValidationError,
    WayShareError,
)
from wayshare.middleware.logging import RequestLoggingMiddleware
from wayshare.middleware.rate_limit import RateLimitMiddleware
from wayshare.middleware.request_id import RequestIDMiddleware, request_id_var
from wayshare.routes import health
from wayshare.routes.entities import build_entity_router
from wayshare.routes.headers import (
    alert_header_name,
    error_header_name,
    failure_alert,
    params_header_name,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Structured Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2026-01-01T12:00:00 [INFO] wayshare.access: GET /api/rides 200 ...

    Called once during app startup, before any other initialization.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
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
    logger.info("WayShare Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health reports the database state
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info("Entities: %s", ", ".join(e.title for e in ENTITIES))
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("WayShare Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_category(status_code: int) -> str:
    if status_code == 404:
        return "not_found"
    if status_code == 429:
        return "rate_limit_exceeded"
    if status_code >= 500:
        return "server_error"
    return "bad_request"


def _field_errors(exc: RequestValidationError) -> List[dict]:
    """Flatten pydantic errors into [{"field": "score", "message": "..."}]."""
    errors = []
    for err in exc.errors():
        # loc looks like ("body", "score") or ("query", "size")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "invalid")})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        EntityRequestError      → exc.status_code (400 / 404) + error alert headers
        RequestValidationError  → 400, error key "validation"
        RateLimitExceededError  → 429 (raised and answered by the rate limit middleware)
        DatabaseError           → 500, generic message
        WayShareError (base)    → 500
        Exception (fallback)    → 500

    Responses never expose stack traces or SQL; details are logged server-side.
    """

    def entity_error_response(exc: EntityRequestError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": _error_category(exc.status_code),
                "error_key": exc.error_key,
                "entity_name": exc.entity_name,
                "message": exc.message,
                "details": exc.context or None,
                "request_id": request_id_var.get(""),
            },
            headers=failure_alert(exc.entity_name, exc.error_key),
        )

    @app.exception_handler(EntityRequestError)
    async def handle_entity_request_error(request: Request, exc: EntityRequestError):
        logger.warning(
            "[%s] %s %s rejected: %s (%s.%s)",
            request_id_var.get(""),
            request.method,
            request.url.path,
            exc.message,
            exc.entity_name,
            exc.error_key,
        )
        return entity_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body or query failed schema validation, e.g. score 6 or missing startTime."""
        entity = entity_for_path(request.url.path)
        errors = _field_errors(exc)
        error = ValidationError(
            message="Request payload failed validation",
            entity_name=entity.name if entity else None,
            field=errors[0]["field"] if len(errors) == 1 else None,
            context={"errors": errors},
        )
        logger.warning("[%s] Validation error on %s: %s", request_id_var.get(""), request.url.path, errors)
        return entity_error_response(error)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(WayShareError)
    async def handle_wayshare_error(request: Request, exc: WayShareError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": _error_category(exc.status_code),
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests call this directly to get an app with fresh middleware state
    (the rate limiter keeps its counters per instance).
    """
    app = FastAPI(
        title="WayShare API",
        description=(
            "Ride-sharing backend: members publish rides, request seats, "
            "exchange messages and rate each other."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-Total-Count",
            "Link",
            "Location",
            "Retry-After",
            alert_header_name(),
            error_header_name(),
            params_header_name(),
        ],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    for entity in ENTITIES:
        app.include_router(build_entity_router(entity))
    app.include_router(health.router)

    return app


# uvicorn expects `wayshare.main:app` to be importable
app = create_app()
