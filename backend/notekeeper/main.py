"""
Notekeeper Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and repository lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (notekeeper.main:app), the `notekeeper` console script, tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────────┐ ┌─────────┐  │
    │  │ /api/notes   │ │ /api/recycle-bin │ │ /health │  │
    │  └──────────────┘ └──────────────────┘ └─────────┘  │
    │                                                     │
    │  app.state.repository: NoteRepository               │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build the repository from settings (unless one was injected)
    3. await repository.init() (fails startup if the backend is unreachable)

    Shutdown:
    1. await repository.close()
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notekeeper import __version__
from notekeeper.config import Settings, settings as default_settings
from notekeeper.exceptions import (
    BackendUnavailableError,
    ConcurrentModificationError,
    DatabaseError,
    NotekeeperError,
    NotFoundError,
    UnsupportedOperationError,
    ValidationError,
)
from notekeeper.middleware.logging import RequestLoggingMiddleware
from notekeeper.middleware.request_id import RequestIDMiddleware, request_id_var
from notekeeper.routes import health, notes, recycle_bin
from notekeeper.storage import create_note_repository
from notekeeper.storage.base import NoteRepository

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once at startup, before the repository is built, so adapter
    init messages are captured.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every request / heartbeat at DEBUG or INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build, initialize and finally close the note repository.

    A repository passed to create_app() is used as-is (tests inject one
    wired to an in-memory backend); otherwise one is built from settings.
    If init() raises, startup fails and the server does not come up.
    """
    config: Settings = app.state.settings
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Notekeeper Backend %s starting up...", __version__)

    repository: Optional[NoteRepository] = app.state.repository
    if repository is None:
        vendor, url, db_name = config.repository_options()
        repository = create_note_repository(
            vendor, url, db_name, timeout=config.backend_timeout
        )
        app.state.repository = repository
    logger.info("Storage backend: %s", repository.backend_name)

    try:
        await repository.init()
    except NotekeeperError:
        logger.error("Storage backend initialization failed; aborting startup")
        await repository.close()
        raise

    logger.info("Server ready at http://%s:%d", config.host, config.port)
    logger.info("=" * 60)

    yield

    logger.info("Notekeeper Backend shutting down...")
    await repository.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400 Bad Request
        NotFoundError                            → 404 Not Found
        ConcurrentModificationError              → 409 Conflict
        UnsupportedOperationError                → 501 Not Implemented
        BackendUnavailableError                  → 503 Service Unavailable
        DatabaseError                            → 500 Internal Server Error
        NotekeeperError (base)                   → 500 Internal Server Error
        Exception (fallback)                     → 500 Internal Server Error

    Exception handlers never expose backend details (status bodies, driver
    messages, stack traces) in the response. Those are logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed request bodies are reported like repository validation failures."""
        errors = exc.errors()
        fields = sorted({str(err["loc"][-1]) for err in errors if err.get("loc")})
        message = "Note title and content are required and must not be empty"
        if fields:
            message = f"Invalid value for: {', '.join(fields)}"
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return _error_response(400, "validation_error", message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConcurrentModificationError)
    async def handle_conflict(request: Request, exc: ConcurrentModificationError):
        logger.warning(
            "[%s] Concurrent modification of note %s", request_id_var.get(""), exc.note_id
        )
        return _error_response(409, "conflict", exc.message)

    @app.exception_handler(UnsupportedOperationError)
    async def handle_unsupported(request: Request, exc: UnsupportedOperationError):
        logger.error("[%s] %s", request_id_var.get(""), exc.message)
        return _error_response(501, "not_implemented", exc.message)

    @app.exception_handler(BackendUnavailableError)
    async def handle_backend_unavailable(request: Request, exc: BackendUnavailableError):
        logger.error(
            "[%s] Backend unavailable: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(503, "service_unavailable", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(NotekeeperError)
    async def handle_notekeeper_error(request: Request, exc: NotekeeperError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log only, never into the response."""
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[NoteRepository] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:   Configuration to use; defaults to the environment-loaded one
        repository: Pre-built repository; when omitted the lifespan handler
                    builds one from ``settings.repository_options()``
    """
    config = settings or default_settings

    app = FastAPI(
        title="Notekeeper API",
        description=(
            "Note storage with a two-stage deletion lifecycle: notes go to a "
            "recycle bin first and can be restored or permanently deleted."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.repository = repository

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(recycle_bin.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the default app with uvicorn."""
    uvicorn.run(
        "notekeeper.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )
