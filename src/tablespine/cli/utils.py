"""
CLI utility helpers — output formatting and catalog access.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from tablespine.api.settings import TableSpineSettings
from tablespine.catalog.schema import ensure_catalog_schema
from tablespine.catalog.store import CatalogStore
from tablespine.core.engine import PersistenceEngine
from tablespine.core.errors import TableSpineError

console = Console()
err_console = Console(stderr=True)


# ── Catalog helper ───────────────────────────────────────────────────────


@contextmanager
def open_catalog(database: str | None = None) -> Iterator[CatalogStore]:
    """Open the snapshot at *database* (default: settings) for one command.

    Writes are flushed on commit; no background flusher runs.
    """
    settings = TableSpineSettings()
    engine = PersistenceEngine(database or settings.database_path, flush_interval_s=0).open()
    try:
        ensure_catalog_schema(engine)
        yield CatalogStore(engine, drop_physical_columns=settings.drop_physical_columns)
    finally:
        engine.close()


def fail(exc: TableSpineError) -> typer.Exit:
    """Print a domain error and return the Exit to raise."""
    err_console.print(f"[bold red]Error[/bold red] ({exc.code}): {exc.message}")
    return typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_rows(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("" if v is None else str(v) for v in row.values()))
    console.print(table)
