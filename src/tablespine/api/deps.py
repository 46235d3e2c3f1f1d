"""
FastAPI dependency injection — shared singletons and per-request params.

The engine, catalog store and endpoint registry are created by the app
lifespan and kept on ``app.state``; the getters below hand them to routers.

Usage in routers::

    from tablespine.api.deps import Catalog, Pagination

    @router.get("/tables")
    def list_tables(catalog: Catalog):
        ...

Tags:
    table-spine, api, dependency-injection, singletons

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query, Request

from tablespine.api.settings import TableSpineSettings
from tablespine.catalog.store import CatalogStore
from tablespine.core.engine import PersistenceEngine
from tablespine.registry.endpoints import EndpointRegistry

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> TableSpineSettings:
    """Cached settings — loaded once per process."""
    return TableSpineSettings()


# ── Application singletons (created by the lifespan) ─────────────────────


def get_engine(request: Request) -> PersistenceEngine:
    return request.app.state.engine


def get_catalog(request: Request) -> CatalogStore:
    return request.app.state.catalog


def get_registry(request: Request) -> EndpointRegistry:
    return request.app.state.registry


# ── Pagination parameters (per-request) ─────────────────────────────────


@dataclass(frozen=True, slots=True)
class PaginationParams:
    """Limit/offset window for record listings."""

    limit: int = 20
    offset: int = 0


def get_pagination(
    limit: int = Query(20, ge=1, le=100, description="Items per page (max 100)"),
    offset: int = Query(0, ge=0, description="Number of records to skip"),
) -> PaginationParams:
    return PaginationParams(limit=limit, offset=offset)


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[TableSpineSettings, Depends(get_settings)]
Engine = Annotated[PersistenceEngine, Depends(get_engine)]
Catalog = Annotated[CatalogStore, Depends(get_catalog)]
Registry = Annotated[EndpointRegistry, Depends(get_registry)]
Pagination = Annotated[PaginationParams, Depends(get_pagination)]
