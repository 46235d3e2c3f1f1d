"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and the lifespan
into a single ``FastAPI`` instance.  The lifespan owns the runtime objects:

    startup   open PersistenceEngine → ensure catalog schema
              → CatalogStore → EndpointRegistry.load_all() → attach()
    shutdown  detach registry → close engine (final snapshot flush)

Manifesto:
    The app factory is the single composition root — the engine, catalog
    and registry are built here and reach routers only through
    :mod:`tablespine.api.deps`.

Tags:
    table-spine, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from tablespine import __version__
from tablespine.api.deps import get_settings
from tablespine.api.middleware import RequestIDMiddleware, TimingMiddleware, register_error_handlers
from tablespine.api.settings import TableSpineSettings
from tablespine.catalog.schema import ensure_catalog_schema
from tablespine.catalog.store import CatalogStore
from tablespine.core.engine import PersistenceEngine
from tablespine.core.logging import configure_logging, get_logger
from tablespine.core.timestamps import utc_now_iso
from tablespine.registry.endpoints import EndpointRegistry

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup / shutdown hooks."""
    settings: TableSpineSettings = app.state.settings
    logger.info("table_spine_starting", version=app.version, database=settings.database_path)

    engine = PersistenceEngine(
        settings.database_path,
        flush_interval_s=settings.flush_interval_s,
        flush_on_write=settings.flush_on_write,
    ).open()
    ensure_catalog_schema(engine)

    catalog = CatalogStore(engine, drop_physical_columns=settings.drop_physical_columns)
    registry = EndpointRegistry(catalog)
    registry.load_all()
    registry.attach()

    app.state.engine = engine
    app.state.catalog = catalog
    app.state.registry = registry

    try:
        yield
    finally:
        registry.detach()
        engine.close()
        logger.info("table_spine_stopped")


def create_app(*, settings: TableSpineSettings | None = None) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : TableSpineSettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.api_title,
        debug=settings.debug,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────
    from tablespine.api.routers import catalog, data

    prefix = settings.api_prefix
    app.include_router(catalog.router, prefix=prefix, tags=["catalog"])
    app.include_router(data.router, prefix=prefix, tags=["data"])

    # Root level for container healthchecks
    @app.get("/health", tags=["health"])
    def health(request: Request):
        registry: EndpointRegistry = request.app.state.registry
        return {
            "status": "ok",
            "service": "table-spine",
            "version": __version__,
            "timestamp": utc_now_iso(),
            "tables": len(registry),
        }

    return app
