"""
Root Typer application for the table-spine CLI.

    tablespine serve          start the REST API (uvicorn, factory mode)
    tablespine tables ...     inspect and edit the catalog offline
"""

from __future__ import annotations

import typer
from typer import Typer

from tablespine import __version__
from tablespine.cli.tables import app as tables_app
from tablespine.cli.utils import console

app = Typer(
    name="tablespine",
    help="table-spine — metadata-declared tables served as REST resources.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"table-spine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """table-spine CLI — serve and manage declared tables."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default: settings)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: settings)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Start the table-spine REST API server."""
    import uvicorn

    from tablespine.api.deps import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"[bold green]Starting table-spine API[/bold green] on {host}:{port}")
    # single worker: the engine owns the only writable copy of the database
    uvicorn.run(
        "tablespine.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=1,
        log_level=log_level,
    )


app.add_typer(tables_app, name="tables", help="Catalog tables and columns.")
