"""
Notes API application factory.

Assembles the notes server: health probes at the root, the REST and
RPC routers under the configured API prefix, request-context middleware,
CORS for the browser editor, and the error envelope handlers.

    uvicorn modules.backend.main:app
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from modules.backend.api import health
from modules.backend.api import router as api_router
from modules.backend.core.config import get_app_config, get_database_url
from modules.backend.core.config_schema import CorsSchema
from modules.backend.core.database import dispose_engine, init_database
from modules.backend.core.exception_handlers import register_exception_handlers
from modules.backend.core.logging import get_logger, setup_logging
from modules.backend.core.middleware import RequestContextMiddleware

logger = get_logger(__name__)

OPENAPI_TAGS = [
    {"name": "notes", "description": "The note forest: browse, search, edit, move, delete."},
    {"name": "images", "description": "Images referenced from note content."},
    {"name": "rpc", "description": "Procedure-call transport over the same operations."},
    {"name": "health", "description": "Liveness and readiness probes."},
]

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_config = get_app_config()
    setup_logging(level=app_config.logging.level)

    await init_database()
    logger.info(
        "Notes server starting",
        extra={
            "version": app_config.application.version,
            "env": app_config.application.environment,
            "database": make_url(get_database_url()).get_backend_name(),
        },
    )
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("Notes server stopped")


def _add_cors(app: FastAPI, cors: CorsSchema) -> None:
    if not cors.origins:
        return
    # No cookies or auth; the editor only needs the REST verbs and its own headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "X-Request-ID", "X-Frontend-ID"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )


def create_app() -> FastAPI:
    settings = get_app_config().application

    app = FastAPI(
        title=settings.name,
        description=settings.description,
        version=settings.version,
        openapi_tags=OPENAPI_TAGS,
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    _add_cors(app, settings.cors)
    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


def get_app() -> FastAPI:
    """The process-wide app, built on first use so importing this module reads no config."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


def __getattr__(name: str) -> FastAPI:
    # `uvicorn modules.backend.main:app` resolves `app` lazily through here
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
