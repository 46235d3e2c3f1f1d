"""
API-specific settings.

Extends :class:`~tablespine.core.settings.TableSpineBaseSettings` with the
knobs that govern the REST transport and the persistence engine behind it.

All values can be overridden via ``TABLESPINE_*`` environment variables,
e.g. ``TABLESPINE_DATABASE_PATH=:memory:``.
"""

from __future__ import annotations

from pydantic import Field

from tablespine import __version__
from tablespine.core.settings import TableSpineBaseSettings


class TableSpineSettings(TableSpineBaseSettings):
    """Settings for the table-spine REST API.

    Order of precedence (highest → lowest):
        1. Environment variables (``TABLESPINE_API_PREFIX``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api/v1", description="URL prefix for all endpoints")
    api_title: str = Field(default="table-spine API", description="OpenAPI title")
    api_version: str = Field(default=__version__, description="OpenAPI version string")

    # ── Persistence ──────────────────────────────────────────────────────
    database_path: str = Field(
        default="./data/app.db",
        description="Snapshot file; ':memory:' keeps everything in RAM",
    )
    flush_interval_s: float = Field(default=5.0, ge=0, description="Background flush period, 0 disables")
    flush_on_write: bool = Field(default=True, description="Flush after every committed write")

    # ── Catalog ──────────────────────────────────────────────────────────
    drop_physical_columns: bool = Field(
        default=True,
        description="Drop the physical column when a column is deleted",
    )

    # ── CORS ─────────────────────────────────────────────────────────────
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins",
    )
