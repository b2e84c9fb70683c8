"""
ClauseGuard Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn clauseguard.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌─────────────┐  │
    │  │  Req ID  │→│ Logging  │→│   GZip   │→│    CORS     │  │
    │  └──────────┘ └──────────┘ └──────────┘ └─────────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  ┌──────────────────────┐ ┌──────────────────────────┐   │
    │  │ /api/analisar-...    │ │ /api/create-checkout-... │   │
    │  │ /api/resumir-...     │ │ /api/analise-liberada    │   │
    │  │ /api/analise-por-... │ │ /health                  │   │
    │  └──────────────────────┘ └──────────────────────────┘   │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ ClauseGuardError→status_code │ Exception→500       │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check (logged, never fatal), upload dir
    Shutdown: dispose the database engine
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

from clauseguard import __version__
from clauseguard.config import settings
from clauseguard.database import dispose_engine
from clauseguard.exceptions import ClauseGuardError, DatabaseError
from clauseguard.middleware.logging import RequestLoggingMiddleware
from clauseguard.middleware.request_id import RequestIDMiddleware, request_id_var
from clauseguard.routes import analysis, health, payments
from clauseguard.services.file_service import file_service

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Ocorreu um erro inesperado. Tente novamente mais tarde."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by the container runtime)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx", "stripe"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup before the yield, shutdown after it."""
    setup_logging()
    logger.info("=" * 60)
    logger.info("ClauseGuard Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # The server still starts: health checks report what is missing
        logger.error("Configuration error: %s", str(e))

    file_service.ensure_upload_dir()

    logger.info("Server ready.")
    logger.info("=" * 60)

    yield

    logger.info("ClauseGuard Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(message: str, code: str) -> dict:
    return {"error": message, "code": code, "request_id": request_id_var.get("")}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"error", "code", "request_id"}` responses.

    Handler hierarchy:
        ClauseGuardError        → exc.status_code (400/403/404/500)
        RequestValidationError  → 400 (malformed body or query)
        Exception (fallback)    → 500, generic message

    Context dicts and stack traces are logged, never returned.
    """

    @app.exception_handler(ClauseGuardError)
    async def handle_clauseguard_error(request: Request, exc: ClauseGuardError):
        rid = request_id_var.get("")
        message = exc.message

        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
            if isinstance(exc, DatabaseError):
                message = GENERIC_ERROR_MESSAGE
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(message, exc.code),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %s", rid, exc.errors())
        return JSONResponse(
            status_code=400,
            content=_error_body("Dados inválidos.", "validation_error"),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(GENERIC_ERROR_MESSAGE, "internal_server_error"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="ClauseGuard API",
        description=(
            "Análise de contratos com IA: extrai o texto do documento, resume as "
            "cláusulas relevantes e libera o relatório completo após o pagamento."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Executed in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(analysis.router)
    app.include_router(payments.router)
    app.include_router(health.router)

    return app


app = create_app()
