"""
DevConnector Backend - FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers.
Who:   uvicorn imports `devconnector.main:app`; tests call create_app().

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌────────┐   │
    │  │  Req ID  │→│  Logging    │→│ GZip │→│  CORS  │   │
    │  └──────────┘ └─────────────┘ └──────┘ └────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌────────────┐ ┌───────────────┐  │
    │  │ /api/profile │ │ /api/posts │ │ GET /health   │  │
    │  └──────────────┘ └────────────┘ └───────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ DevConnectorError→own status │ other→500     │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate settings (logged, not fatal)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from devconnector import __version__
from devconnector.config import settings
from devconnector.database import dispose_engine
from devconnector.exceptions import DatabaseError, DevConnectorError, ValidationError
from devconnector.middleware import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    request_id_var,
)
from devconnector.routes import health, posts, profile

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("DevConnector API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving; /health and the logs report the problem
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("DevConnector API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, **extra: Any) -> Dict[str, Any]:
    body = {
        "error": error,
        "message": message,
        "msg": message,
        "request_id": extra.pop("request_id", None) or request_id_var.get(""),
    }
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def _field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """Flattens pydantic errors into [{msg, param, location}] entries."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        location = loc[0] if loc else "body"
        param = ".".join(loc[1:]) or None
        errors.append({"msg": err.get("msg", "Invalid value"), "param": param, "location": location})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exceptions to JSON error responses.

    Handler hierarchy:
        ValidationError        → 400 with `errors` list
        RequestValidationError → 400 with `errors` list (instead of FastAPI's 422)
        DatabaseError          → 500 "Server error", context logged only
        DevConnectorError      → the exception's own status_code
        Exception (fallback)   → 500 "Server error"
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, errors=exc.errors),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = _field_errors(exc)
        message = errors[0]["msg"] if errors else "Invalid request"
        logger.warning("Request validation failed: %s", errors)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", message, errors=errors),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, "Server error"),
        )

    @app.exception_handler(DevConnectorError)
    async def handle_application_error(request: Request, exc: DevConnectorError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log("%s (%d): %s | Context: %s", type(exc).__name__, exc.status_code, exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, after RequestIDMiddleware has reset
        # request_id_var; the id survives on the shared scope state.
        rid = getattr(request.state, "request_id", "")
        logger.error("Unexpected error [%s]: %s", rid or "-", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("internal_server_error", "Server error", request_id=rid),
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Builds a fully configured application. Tests create a fresh one per test."""
    app = FastAPI(
        title="DevConnector API",
        description=(
            "Developer profiles, experience and education history, and a social "
            "feed with likes and comments."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
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

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(profile.router)
    app.include_router(posts.router)
    app.include_router(health.router)

    return app


app = create_app()
