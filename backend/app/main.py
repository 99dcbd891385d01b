"""
SentenceBoard Backend - FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       lifespan() validates configuration on startup and disposes the
       database engine on shutdown.
Who:   uvicorn app.main:app

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │   /auth/*  (HTML)   /, /profile  (HTML)                  │
    │   /api/sentences/* (JSON)        /health (JSON)          │
    │                                                          │
    │  Exception Handlers:                                     │
    │   Validation→400  Unauthenticated→401  Forbidden→403     │
    │   NotFound→404    LoginRequired→303   Database→500       │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from urllib.parse import urlencode

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    DatabaseError,
    ForbiddenError,
    LoginRequiredError,
    NotFoundError,
    SentenceBoardError,
    UnauthenticatedError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import auth, health, pages, sentences

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request chatter from libraries
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
    logger.info("=" * 60)
    logger.info("SentenceBoard Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving; /health and local login still work
        logger.error("Configuration error: %s", str(e))

    if not settings.google_oauth_enabled:
        logger.info("Google sign-in disabled (GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET unset)")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("SentenceBoard Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: dict = None) -> dict:
    body = {"error": error, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError         → 400 {"error": "validation_error", "details": {field, reason}}
        RequestValidationError  → 400 (body or query that does not parse)
        LoginRequiredError      → 303 to /auth/login?error=...&next=...
        UnauthenticatedError    → 401
        ForbiddenError          → 403
        NotFoundError           → 404
        DatabaseError           → 500 (context logged, never returned)
        SentenceBoardError      → 500
        Exception               → 500 (stack logged)

    Starlette picks the handler registered for the closest class in the
    exception's MRO, so LoginRequiredError never reaches the 401 handler.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # ctx may hold exception objects; keep only the JSON-safe keys
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "validation_error",
                "Invalid request data.",
                {"reason": "invalid_request", "errors": errors},
            ),
        )

    @app.exception_handler(LoginRequiredError)
    async def handle_login_required(request: Request, exc: LoginRequiredError):
        params = {"error": exc.message}
        if exc.next_path:
            params["next"] = exc.next_path
        return RedirectResponse(url=f"/auth/login?{urlencode(params)}", status_code=303)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.info("[%s] Forbidden: %s | %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=403,
            content=_error_body("forbidden", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(SentenceBoardError)
    async def handle_app_error(request: Request, exc: SentenceBoardError):
        logger.error(
            "[%s] Unhandled %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="SentenceBoard API",
        description=(
            "Post short categorized sentences. Anyone can read and search; "
            "logged-in authors can edit and delete their own."
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

    app.include_router(auth.router)
    app.include_router(pages.router)
    app.include_router(sentences.router)
    app.include_router(health.router)

    return app


app = create_app()
