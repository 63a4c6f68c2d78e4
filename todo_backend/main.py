"""
Todo Backend — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
       The datastore handle and the password hasher are built here and placed
       on app.state, where the request dependencies pick them up.
Who:   Called by uvicorn to start the server (uvicorn todo_backend.main:app)
       and by the test suite with its own settings and database.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Request ID  │→│ Logging  │→│  CORS           │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ POST /login  │ │ GET/POST     │ │ GET /health │  │
    │  │              │ │   /todos     │ │             │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ Unauthorized→401 │          │   │
    │  │ Conflict→409   │ DB / hashing→500 │ other→500│   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate required configuration (refuse to start without it)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_backend import __version__
from todo_backend.config import Settings, settings as default_settings
from todo_backend.database import Database
from todo_backend.exceptions import (
    ConflictError,
    DatabaseError,
    PasswordHashingError,
    TodoAppError,
    UnauthorizedError,
    ValidationError,
)
from todo_backend.middleware.cors import PreflightCORSMiddleware
from todo_backend.middleware.logging import RequestLoggingMiddleware
from todo_backend.middleware.request_id import RequestIDMiddleware, request_id_var
from todo_backend.routes import auth, health, todos
from todo_backend.services.password_service import PasswordService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then configuration validation. A missing credential
    raises out of the lifespan, which aborts server startup.

    Shutdown: dispose the database engine.
    """
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("Todo Backend starting up...")

    try:
        config.validate_required()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Todo Backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler table:
        ValidationError / RequestValidationError → 400
        UnauthorizedError                        → 401
        ConflictError                            → 409
        Starlette HTTPException (404, 405, ...)  → its own status
        DatabaseError / PasswordHashingError     → 500 (generic message)
        TodoAppError (base)                      → 500
        Exception (fallback)                     → 500

    Internal details (context dicts, stack traces) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Unparseable JSON or missing/invalid fields. Input values are not echoed."""
        fields = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request body: %s", request_id_var.get(""), fields)
        return _error_response(
            400,
            "validation_error",
            "Invalid request body",
            details={"fields": fields},
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return _error_response(401, "unauthorized", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        return _error_response(409, "conflict", exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        codes = {404: "not_found", 405: "method_not_allowed"}
        response = _error_response(
            exc.status_code,
            codes.get(exc.status_code, "http_error"),
            str(exc.detail),
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(PasswordHashingError)
    async def handle_password_hashing_error(request: Request, exc: PasswordHashingError):
        logger.error(
            "[%s] Password hashing error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(TodoAppError)
    async def handle_app_error(request: Request, exc: TodoAppError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
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
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config:   settings to use (default: the module-level singleton)
        database: datastore handle (default: built from config.database_url)

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    config = config or default_settings

    app = FastAPI(
        title="Todo Backend API",
        description=(
            "Authenticated todo list API. Log in with email and password (accounts "
            "are created on first login) and manage your own todo items."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.database = database or Database.from_settings(config)
    app.state.password_service = PasswordService.from_settings(config)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS.
    origins = config.cors_origins_list
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(todos.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
