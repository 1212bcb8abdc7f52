"""
DevCamper Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the AppContext (or takes one from the caller),
       registers middleware, exception handlers, routers and the static
       uploads mount, and returns the app.
Who:   uvicorn (`uvicorn devcamper.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware (outermost first):                           │
    │  Request ID → Logging → Security Headers → Rate Limit    │
    │  → Sanitize → GZip → CORS                                │
    │                                                          │
    │  /api/v1: bootcamps, courses, reviews, auth, users       │
    │  /uploads: bootcamp photos (static)                      │
    │  /health                                                 │
    │                                                          │
    │  Exception handlers → translate_exception → envelope     │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (production)
    3. Create the upload directory
    4. Connect to the database; failure aborts startup

    Shutdown:
    1. Close the geocoder client and dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from devcamper import __version__
from devcamper.config import Settings
from devcamper.config import settings as default_settings
from devcamper.context import AppContext
from devcamper.exceptions import ApiError, translate_exception
from devcamper.middleware.logging import RequestLoggingMiddleware
from devcamper.middleware.rate_limit import RateLimitMiddleware
from devcamper.middleware.request_id import RequestIDMiddleware
from devcamper.middleware.sanitize import SanitizeMiddleware
from devcamper.middleware.security_headers import SecurityHeadersMiddleware
from devcamper.responses import error_response
from devcamper.routes import auth, bootcamps, courses, health, reviews, users

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once, at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    context: AppContext = app.state.context
    settings = context.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("DevCamper API starting up (%s)...", settings.environment)

    # Misconfigured production is fatal
    settings.validate_required_for_production()

    uploads = Path(settings.file_upload_path)
    uploads.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", uploads.resolve())

    try:
        await context.connect()
    except Exception:
        logger.critical("Database unreachable at startup; shutting down", exc_info=True)
        await context.close()
        raise

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("DevCamper API shutting down...")
    await context.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Route every escaping exception through translate_exception().

    Handler table:
        ApiError                 → carried status and message
        RequestValidationError   → 400, aggregated field messages
        IntegrityError           → 400 duplicate / invalid reference
        StarletteHTTPException   → its own status (404 for unknown routes, 405, ...)
        Exception                → 500 "Server Error", traceback logged only
    """

    async def handle_known(request: Request, exc: Exception):
        return error_response(translate_exception(exc), exc)

    for exc_type in (ApiError, RequestValidationError, IntegrityError, StarletteHTTPException):
        app.add_exception_handler(exc_type, handle_known)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        return error_response(translate_exception(exc), exc)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: defaults to values read from the environment / .env
        context:  prebuilt AppContext (tests inject a fake geocoder this way);
                  built from settings when omitted
    """
    if context is None:
        context = AppContext.build(settings or default_settings)
    settings = context.settings

    app = FastAPI(
        title="DevCamper API",
        description="Bootcamp directory: bootcamps, courses, reviews, users and authentication.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = context

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → SecurityHeaders →
    # RateLimit → Sanitize → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SanitizeMiddleware)
    app.add_middleware(RateLimitMiddleware, settings=settings)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    # Nested routers share the /bootcamps prefix and are included first
    app.include_router(courses.nested_router, prefix=API_PREFIX)
    app.include_router(reviews.nested_router, prefix=API_PREFIX)
    app.include_router(bootcamps.router, prefix=API_PREFIX)
    app.include_router(courses.router, prefix=API_PREFIX)
    app.include_router(reviews.router, prefix=API_PREFIX)
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(users.router, prefix=API_PREFIX)
    app.include_router(health.router)

    app.mount(
        "/uploads",
        StaticFiles(directory=settings.file_upload_path, check_dir=False),
        name="uploads",
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `devcamper.main:app` to be importable
app = create_app()
