"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (upload directory, database
engine). Middleware, error handlers, and routers all registered here.

Process-wide state lives on app.state and is built exactly once, here:
the settings, the TokenIssuer holding the signing secret, and the
attachment storage backend.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from itemvault import __version__
from itemvault.api import api_router
from itemvault.auth.jwt import TokenIssuer
from itemvault.config import Settings, settings
from itemvault.errors import AppError, StoreError, describe_validation_error
from itemvault.services.file_storage import LocalFileStorage

logger = structlog.get_logger()


def configure_logging(debug: bool = False) -> None:
    """Console output while developing, JSON lines everywhere else."""
    renderer = (
        structlog.dev.ConsoleRenderer()
        if debug
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    cfg: Settings = app.state.settings
    app.state.file_storage.ensure_root()
    logger.info(
        "itemvault.starting",
        version=__version__,
        environment=cfg.environment,
        port=cfg.port,
    )

    yield

    logger.info("itemvault.shutdown")

    from itemvault.db.engine import engine
    await engine.dispose()


def _error_body(message: str) -> dict:
    return {"success": False, "message": message}


def register_error_handlers(app: FastAPI) -> None:
    """Every error leaves the app as {"success": false, "message": ...}."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if isinstance(exc, StoreError):
            # Detail was logged where it happened; the client gets the generic text
            logger.warning("request.store_error", path=request.url.path)
        return JSONResponse(status_code=exc.status, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=_error_body(describe_validation_error(exc.errors())),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("request.unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content=_error_body("Internal server error"))


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    cfg = app_settings or settings
    configure_logging(cfg.debug)

    app = FastAPI(
        title="ItemVault",
        description="Personal item records behind username/password auth",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.token_issuer = TokenIssuer.from_settings(cfg)
    app.state.file_storage = LocalFileStorage(cfg.upload_dir, url_prefix="uploads")

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from itemvault.middleware.request_id import RequestIdMiddleware
    from itemvault.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(api_router)

    # Stored attachments are referenced as "uploads/<name>"
    app.mount(
        "/uploads",
        StaticFiles(directory=cfg.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


# Default app instance (used by uvicorn: itemvault.main:app)
app = create_app()
