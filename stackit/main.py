"""
StackIt Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn stackit.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐       │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │       │
    │  └──────────────┘ └──────────┘ └─────────────────┘       │
    │                                                          │
    │  Routes:                                                 │
    │  ┌────────────────┐ ┌──────────────┐ ┌───────────────┐   │
    │  │ /api/questions │ │ /api/answers │ │ /api/profiles │   │
    │  └────────────────┘ └──────────────┘ └───────────────┘   │
    │  ┌────────────────┐ ┌──────────────┐                     │
    │  │ /api/tags      │ │ /health      │                     │
    │  └────────────────┘ └──────────────┘                     │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Auth→401 │ Permission→403 │ 404 │ 500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration, log readiness
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from stackit import __version__
from stackit.config import settings
from stackit.database import dispose_engine
from stackit.exceptions import (
    AuthenticationError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    StackItError,
    ValidationError,
)
from stackit.middleware.logging import RequestLoggingMiddleware
from stackit.middleware.rate_limit import RateLimitMiddleware
from stackit.middleware.request_id import RequestIDMiddleware, request_id_var
from stackit.routes import answers, health, profiles, questions, tags

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
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
    logger.info("StackIt Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: anonymous reads and health checks still work
        logger.error("Configuration error: %s", str(e))
        logger.error("Authenticated requests will be rejected until this is fixed.")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("StackIt Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# (exception type, HTTP status, error code, log level or None, include details)
# Starlette resolves a handler by the closest class in the exception MRO
_ERROR_TABLE: List[Tuple[Type[StackItError], int, str, Optional[int], bool]] = [
    (ValidationError, 400, "validation_error", logging.WARNING, True),
    (AuthenticationError, 401, "authentication_error", None, False),
    (PermissionDeniedError, 403, "permission_denied", logging.WARNING, False),
    (NotFoundError, 404, "not_found", None, False),
    (RateLimitExceededError, 429, "rate_limit_exceeded", None, True),
    (DatabaseError, 500, "server_error", logging.ERROR, False),
    (StackItError, 500, "server_error", logging.ERROR, False),
]


def _error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": code, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def _make_handler(status_code: int, code: str, log_level: Optional[int], with_details: bool):
    async def handler(request: Request, exc: StackItError) -> JSONResponse:
        if log_level is not None:
            logger.log(
                log_level,
                "[%s] %s on %s %s: %s | Context: %s",
                request_id_var.get(""),
                type(exc).__name__,
                request.method,
                request.url.path,
                exc.message,
                exc.context,
            )

        headers = {}
        if isinstance(exc, AuthenticationError):
            headers["WWW-Authenticate"] = "Bearer"
        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)

        return JSONResponse(
            status_code=status_code,
            content=_error_body(code, exc.message, exc.context if with_details else None),
            headers=headers or None,
        )

    return handler


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the StackItError hierarchy to status codes with one response shape:
    {error, message, details?, request_id}.

        ValidationError         → 400 (details carry the offending field)
        AuthenticationError     → 401
        PermissionDeniedError   → 403
        NotFoundError           → 404
        RateLimitExceededError  → 429
        DatabaseError           → 500
        StackItError (base)     → 500
        Exception (fallback)    → 500, generic message

    Handlers never expose stack traces or SQL in the response.
    """
    for exc_class, status_code, code, log_level, with_details in _ERROR_TABLE:
        app.add_exception_handler(exc_class, _make_handler(status_code, code, log_level, with_details))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        """Generic 500 in the response, full stack trace in the log."""
        logger.error(
            "[%s] Unexpected error on %s %s: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "Something went wrong on our side. Please try again.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="StackIt API",
        description=(
            "Q&A forum backend: ask questions, tag them, answer, vote, "
            "and accept the answer that solved your problem."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

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
            "Location",
            "Retry-After",
        ],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(questions.router)
    app.include_router(answers.router)
    app.include_router(profiles.router)
    app.include_router(tags.router)
    app.include_router(health.router)

    return app


app = create_app()
