"""
Catalog Manager - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn catalog.main:app`, or `python -m catalog`) and the tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │    /api/entries[/{id}]   /api/upload   /health      │
    │    /  /ui/entries  (HTML, via the API)              │
    │    /uploads/*            (static files)             │
    │                                                     │
    │  Exception Handlers → {"error": ..., "request_id"}  │
    │    ValidationError/UploadRejected → 400             │
    │    NotFound → 404    Storage/FileStorage → 500      │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → uploads directory → create tables → seed if empty
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog import __version__
from catalog.config import settings
from catalog.database import async_session_factory, dispose_engine, init_db
from catalog.exceptions import (
    FileStorageError,
    NotFoundError,
    StorageError,
    UploadRejectedError,
    ValidationError,
)
from catalog.middleware.logging import RequestLoggingMiddleware
from catalog.middleware.request_id import RequestIDMiddleware, request_id_var
from catalog.routes import entries, health, ui, upload
from catalog.services.entry_service import entry_service
from catalog.services.upload_service import upload_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access logger already covers what uvicorn's would print
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

async def open_store() -> bool:
    """
    Create the schema and seed an empty table.

    Returns False when the database cannot be opened. The server keeps
    running in that case and every request touching the Store answers 500.
    """
    try:
        await init_db()
        if settings.seed_initial_entries:
            async with async_session_factory() as session:
                inserted = await entry_service.seed_initial_entries(session)
                await session.commit()
            if inserted:
                logger.info("Initial entries imported: %d", inserted)
    except Exception as e:
        logger.error("Error opening database: %s", e, exc_info=True)
        return False
    return True


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Catalog Manager %s starting up...", __version__)

    uploads_dir = upload_service.ensure_directory()
    logger.info("Uploads directory: %s (served at %s)", uploads_dir, settings.uploads_url_prefix)

    if await open_store():
        logger.info("Store ready")

    logger.info("Server running on http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Catalog Manager shutting down...")
    await dispose_engine()
    logger.info("Database connection closed.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    """Uniform error body: a human-readable `error` plus the request ID."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "request_id": request_id_var.get("")},
        headers=headers,
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(item) for item in err.get("loc", ()) if item != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Invalid request: " + "; ".join(parts) if parts else "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the {"error": ...} body.

    Handler hierarchy:
        ValidationError         → 400
        UploadRejectedError     → 400
        RequestValidationError  → 400 (malformed JSON, wrong field types)
        NotFoundError           → 404
        StorageError            → 500, driver message passed through
        FileStorageError        → 500
        HTTPException           → its own status (unknown routes, 405s)
        Exception               → 500, generic message (stack trace logged only)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(400, exc.message)

    @app.exception_handler(UploadRejectedError)
    async def handle_upload_rejected(request: Request, exc: UploadRejectedError):
        logger.warning("[%s] Upload rejected: %s %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _describe_validation_errors(exc)
        logger.warning("[%s] %s", request_id_var.get(""), message)
        return error_response(400, message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error("[%s] Storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return error_response(500, "An unexpected error occurred. Please try again.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Catalog Manager API",
        description=(
            "Record entries (name, ingredients, recipe, optional image and comment), "
            "upload images for them, and browse them in a server-rendered UI."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → GZip → CORS → route
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(entries.router)
    app.include_router(upload.router)
    app.include_router(health.router)
    app.include_router(ui.router)

    # StaticFiles checks the directory at construction, so create it first
    app.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=str(upload_service.ensure_directory())),
        name="uploads",
    )

    return app


# uvicorn expects `catalog.main:app` to be importable
app = create_app()
