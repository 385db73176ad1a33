"""
PackTrack Backend — FastAPI Application Factory
================================================

What:  Builds the FastAPI application: middleware, exception handlers,
       routers and the static mount for uploaded documents.
Who:   uvicorn (`uvicorn packtrack.main:app`) and the test suite
       (`create_app()` with dependency overrides).

Application Layout:
    ┌──────────────────────────────────────────────────────┐
    │ Middleware:  Request ID → Access Log → GZip → CORS   │
    │                                                      │
    │ /api/v1/packaging/...   packaging aggregate          │
    │ /api/v1/users/...       registration, login, users   │
    │ /health                 database + storage probe     │
    │ /uploads/...            stored documents (static)    │
    │                                                      │
    │ Errors: PackTrackError → its status_code             │
    │         request validation → 400 (first message)     │
    │         anything else → 500                          │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → upload directory → schema (SQLite only)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from packtrack import __version__
from packtrack.config import settings
from packtrack.database import create_schema, dispose_engine
from packtrack.exceptions import PackTrackError
from packtrack.middleware.logging import RequestLoggingMiddleware
from packtrack.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from packtrack.routes import health, packaging, users
from packtrack.services.file_store import file_store

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════


def setup_logging() -> None:
    """Configure the root logger once; stdout so containers capture it."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx", "passlib"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("PackTrack Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks and local development still work
        logger.warning("Configuration warning: %s", str(e))

    logger.info("Upload directory: %s", file_store.ensure_root())

    if settings.is_sqlite:
        await create_schema()
        logger.info("SQLite schema created")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("PackTrack Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════


def _request_id(request: Request) -> str:
    # ServerErrorMiddleware runs outside RequestIDMiddleware, after the
    # ContextVar has been reset
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_body(error: str, message: str, request_id: str = "") -> Dict[str, Any]:
    return {
        "success": False,
        "error": error,
        "message": message,
        "request_id": request_id or request_id_var.get(""),
    }


def first_validation_message(errors: List[Dict[str, Any]]) -> str:
    """
    Message of the first failed field, prefixed with its location.

    ("body", "components", 0, "quantity") → "components.0.quantity: ..."
    """
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "form")]
    message = first.get("msg", "Invalid value")
    return f"{'.'.join(location)}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the error envelope.

    PackTrackError subclasses carry their own status_code/error_code.
    5xx context is logged server-side; responses only carry the message.
    """

    @app.exception_handler(PackTrackError)
    async def handle_packtrack_error(request: Request, exc: PackTrackError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid,
                type(exc).__name__,
                exc.message,
                exc.context,
            )
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = first_validation_message(exc.errors())
        logger.info("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return JSONResponse(status_code=400, content=_error_body("validation_error", message))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = "not_found" if exc.status_code == 404 else "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(error, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
                request_id=rid,
            ),
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════


def create_app() -> FastAPI:
    app = FastAPI(
        title="PackTrack API",
        description=(
            "Packaging compliance tracking: packaging items, their components "
            "and PPWR compliance documents."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(packaging.router, prefix=API_PREFIX)
    app.include_router(users.router, prefix=API_PREFIX)
    app.include_router(health.router)

    # check_dir=False: the directory is created in the lifespan
    app.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=Path(settings.upload_root), check_dir=False),
        name="uploads",
    )

    return app


app = create_app()
