"""
Library API — FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌───────────┐ ┌──────┐ ┌────────┐          │
    │  │  Req ID  │→│  Logging  │→│ GZip │→│  CORS  │          │
    │  └──────────┘ └───────────┘ └──────┘ └────────┘          │
    │                                                          │
    │  Routes:                                                 │
    │  ┌─────────────┐ ┌──────────────────┐ ┌──────────────┐   │
    │  │ /api/authors│ │/api/authorcoll...│ │ /api/authors │   │
    │  │             │ │                  │ │  /{id}/books │   │
    │  └─────────────┘ └──────────────────┘ └──────────────┘   │
    │  ┌─────────────┐                                         │
    │  │ GET /health │                                         │
    │  └─────────────┘                                         │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ Conflict→409 │ 500 │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Resolve the AuthorDto → Author property mapping (fail fast if missing)
    3. Log startup complete

    Shutdown:
    1. Dispose database engine (close all connections)
    2. Log shutdown complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    ConfigurationError,
    ConflictError,
    DatabaseError,
    FieldNotFoundError,
    LibraryApiError,
    NotFoundError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.models.author import Author
from app.routes import author_collections, authors, books, health
from app.schemas.author import AuthorDto
from app.services.property_mapping import property_mapping_registry

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

    # Third-party libraries log every query and connection at INFO
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
    logger.info("Library API starting up...")

    # A missing sort mapping is a deployment defect, not a request error
    try:
        property_mapping_registry.get_mapping(AuthorDto, Author)
    except ConfigurationError as e:
        logger.error("Configuration error: %s | Context: %s", e.message, e.context)
        raise

    logger.info(
        "Paging: default page size %d, max page size %d, default order '%s'",
        settings.default_page_size,
        settings.max_page_size,
        settings.default_order_by,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Library API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError / FieldNotFoundError → 400 Bad Request
        RequestValidationError (bad query)   → 400 Bad Request
        RequestValidationError (bad body)    → 422 Unprocessable Entity
        NotFoundError                        → 404 Not Found
        ConflictError                        → 409 Conflict
        ConfigurationError                   → 500 Internal Server Error
        DatabaseError                        → 500 Internal Server Error
        LibraryApiError (base)               → 500 Internal Server Error
        Exception (fallback)                 → 500 Internal Server Error

    Internal details (SQL, stack traces) are logged server-side only.
    """

    @app.exception_handler(FieldNotFoundError)
    async def handle_field_not_found(request: Request, exc: FieldNotFoundError):
        rid = request_id_var.get("")
        logger.warning("[%s] Unknown field requested: %s", rid, exc.field_name)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Client sent invalid input; tell them what's wrong."""
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = exc.errors()
        if errors and all(error["loc"][0] == "query" for error in errors):
            logger.warning("[%s] Invalid query parameters on %s", rid, request.url.path)
            return _error_response(
                400,
                "validation_error",
                "One or more query parameters are invalid.",
                {"errors": errors},
            )
        logger.warning("[%s] Unprocessable request body on %s", rid, request.url.path)
        return _error_response(
            422,
            "unprocessable_entity",
            "The request body failed validation.",
            {"errors": errors},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.info("[%s] Conflict: %s", rid, exc.message)
        return _error_response(409, "conflict", exc.message)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        rid = request_id_var.get("")
        logger.error("[%s] Configuration error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the client, details logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(LibraryApiError)
    async def handle_library_error(request: Request, exc: LibraryApiError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled application error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected fault happened. Try again later.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Library API",
        description=(
            "Authors and their books, with sorting, paging, sparse fieldsets "
            "and hypermedia links."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Pagination", "Location"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(authors.router)
    app.include_router(author_collections.router)
    app.include_router(books.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
