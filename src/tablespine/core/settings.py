"""Shared base settings.

``TableSpineBaseSettings`` carries the knobs every entry point needs (bind
address, log level).  Transport-specific settings extend it,
see :class:`tablespine.api.settings.TableSpineSettings`.

Features:
    - **Pydantic validation:** type-checked at startup
    - **Environment-driven:** ``TABLESPINE_*`` variables and a ``.env`` file
    - **Extra ignore:** unknown env vars don't cause startup failures

Examples:
    >>> from tablespine.core.settings import TableSpineBaseSettings
    >>> TableSpineBaseSettings(log_level="DEBUG").log_level
    'DEBUG'

Tags:
    settings, configuration, pydantic, environment, table-spine
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

class TableSpineBaseSettings(BaseSettings):
    """Common settings shared by the API server and the CLI.

    Fields
    ──────
    host         : Bind address for the HTTP server
    port         : Bind port for the HTTP server
    debug        : Enable debug mode (verbose logging, error messages)
    log_level    : Structlog log level
    log_json     : Force JSON (True) or console (False) log output; auto if unset
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Network ──────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool | None = None
