"""
Projects API — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn projects_api.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────┐ ┌──────┐ ┌────────────┐  │
    │  │  Req ID  │→│ Logging │→│ GZip │→│    CORS    │  │
    │  └──────────┘ └─────────┘ └──────┘ └────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  login · menu · authorization · user · userrole     │
    │  presales · development · attachment · health       │
    │  /Docs (static documents)                           │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ Conflict→409 │  │
    │  │ BusinessRule→422 │ Infrastructure→500 + log  │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Create the documents directory

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from projects_api import __version__
from projects_api.config import settings
from projects_api.database import dispose_engine
from projects_api.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from projects_api.middleware.logging import RequestLoggingMiddleware
from projects_api.middleware.request_id import RequestIDMiddleware, request_id_var
from projects_api.routes import (
    attachments,
    authorizations,
    development,
    health,
    login,
    menus,
    presales,
    roles,
    users,
)
from projects_api.schemas.common import error_body
from projects_api.services.error_log import error_log

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
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
    logging.getLogger("aioodbc").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Projects API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")
        # Keep serving: /health and read-only routes still answer

    docs = Path(settings.docs_root)
    docs.mkdir(parents=True, exist_ok=True)
    logger.info("Documents directory: %s", docs.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Projects API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def route_identity(request: Request) -> Tuple[str, str]:
    """
    (controller, action) for the error log: the matched route's first tag
    and its endpoint name. Unmatched requests fall back to the path.
    """
    route = request.scope.get("route")
    tags = getattr(route, "tags", None) or ["Unknown"]
    action = getattr(route, "name", None) or request.url.path
    return str(tags[0]), action


def _server_error(request: Request, message: str, detail: str, source: str) -> JSONResponse:
    """Generic 500 envelope; the detail goes to the error log after the response is sent."""
    controller, action = route_identity(request)
    rid = request_id_var.get("")
    return JSONResponse(
        status_code=500,
        content=error_body(message, rid),
        # Unhandled errors are answered outside RequestIDMiddleware
        headers={"X-Request-ID": rid} if rid else None,
        background=BackgroundTask(
            error_log.record,
            controller=controller,
            action=action,
            message=detail,
            source=source,
        ),
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"{location}: {first.get('msg', 'invalid value')}"
    return str(first.get("msg", "Invalid request"))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error envelopes.

    Handler hierarchy:
        ValidationError, RequestValidationError → 400 Bad Request
        NotFoundError                           → 404 Not Found
        ConflictError                           → 409 Conflict
        HTTPException (unknown route, method)   → its own status, same envelope
        BusinessRuleViolation                   → 422 (message from the database, verbatim)
        InfrastructureError                     → 500, generic message, error log row
        Exception (fallback)                    → 500, generic message, error log row

    Response bodies never carry SQL text, stack traces or connection details.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content=error_body(exc.message, rid))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        message = _validation_message(exc)
        logger.warning("[%s] Request validation failed: %s", rid, message)
        return JSONResponse(status_code=400, content=error_body(message, rid))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.warning("[%s] Not found: %s", rid, exc.message)
        return JSONResponse(status_code=404, content=error_body(exc.message, rid))

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.warning("[%s] Conflict: %s", rid, exc.message)
        return JSONResponse(status_code=409, content=error_body(exc.message, rid))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown routes (404) and wrong methods (405) raised by the router
        rid = request_id_var.get("")
        logger.warning("[%s] HTTP %d on %s: %s", rid, exc.status_code, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), rid),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(BusinessRuleViolation)
    async def handle_business_rule(request: Request, exc: BusinessRuleViolation):
        rid = request_id_var.get("")
        logger.warning("[%s] Business rule %s: %s", rid, exc.error_number, exc.message)
        return JSONResponse(status_code=422, content=error_body(exc.message, rid))

    @app.exception_handler(InfrastructureError)
    async def handle_infrastructure_error(request: Request, exc: InfrastructureError):
        rid = request_id_var.get("")
        detail = exc.context.get("error") or exc.context.get("detail") or exc.message
        logger.error("[%s] Infrastructure error: %s | Context: %s", rid, exc.message, exc.context)
        return _server_error(request, exc.message, str(detail), exc.source)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _server_error(
            request,
            "An unexpected error occurred. Please try again or contact support.",
            str(exc),
            "Controller",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Projects API",
        description=(
            "Project management backend: pre-sales leads, development tracking, "
            "attachments, menus, role authorization and OTP login over SQL Server "
            "stored procedures."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: RequestID → Logging → GZip → CORS
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

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(login.router)
    app.include_router(menus.router)
    app.include_router(authorizations.router)
    app.include_router(users.router)
    app.include_router(roles.router)
    app.include_router(presales.router)
    app.include_router(development.router)
    app.include_router(attachments.router)
    app.include_router(health.router)

    # Read-only documents; the directory is created at startup
    app.mount(
        "/Docs",
        StaticFiles(directory=settings.docs_root, check_dir=False),
        name="docs-files",
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
