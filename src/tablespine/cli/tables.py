"""
CLI: ``tablespine tables`` — inspect and edit the catalog offline.

Commands open the snapshot file directly; run them while the server is
stopped, or the server's next flush overwrites their changes.
"""

from __future__ import annotations

from typing import Annotated

import typer

from tablespine.catalog.models import DataType
from tablespine.cli.utils import console, fail, open_catalog, print_json, print_rows
from tablespine.core.errors import TableSpineError

app = typer.Typer(no_args_is_help=True)

Database = Annotated[str | None, typer.Option("--database", "-d", help="Snapshot file (default: settings)")]


@app.command("list")
def list_tables(
    database: Database = None,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List declared tables."""
    with open_catalog(database) as catalog:
        rows = [
            {**t.to_dict(), "columns": len(catalog.list_columns(t.id))}
            for t in catalog.list_tables()
        ]
    if json_out:
        print_json(rows)
        return
    print_rows(rows, title="Tables")


@app.command("show")
def show_table(
    name: str = typer.Argument(..., help="Table name"),
    database: Database = None,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show a table's columns."""
    try:
        with open_catalog(database) as catalog:
            table = catalog.get_table_by_name(name)
            columns = [c.to_dict() for c in catalog.list_columns(table.id)]
    except TableSpineError as exc:
        raise fail(exc) from exc

    if json_out:
        print_json({**table.to_dict(), "columns": columns})
        return
    console.print(f"[bold]{table.name}[/bold] [dim](id {table.id})[/dim]")
    print_rows(
        [
            {
                "name": c["name"],
                "type": c["data_type"],
                "required": c["is_required"],
                "default": c["default_value"],
                "max_length": c["max_length"],
                "position": c["position"],
            }
            for c in columns
        ],
        title="Columns",
    )


@app.command("create")
def create_table(
    name: str = typer.Argument(..., help="Table name"),
    display_name: str | None = typer.Option(None, "--display-name"),
    database: Database = None,
) -> None:
    """Declare a table."""
    try:
        with open_catalog(database) as catalog:
            table = catalog.create_table(name, display_name)
    except TableSpineError as exc:
        raise fail(exc) from exc
    console.print(f"[green]Created table[/green] {table.name} (id {table.id})")


@app.command("add-column")
def add_column(
    table: str = typer.Argument(..., help="Table name"),
    name: str = typer.Argument(..., help="Column name"),
    data_type: DataType = typer.Option(DataType.STRING, "--type", "-t", help="Semantic type"),
    required: bool = typer.Option(False, "--required"),
    default: str | None = typer.Option(None, "--default", help="Default value"),
    max_length: int | None = typer.Option(None, "--max-length"),
    database: Database = None,
) -> None:
    """Declare a column on a table."""
    try:
        with open_catalog(database) as catalog:
            declared = catalog.get_table_by_name(table)
            position = len(catalog.list_columns(declared.id))
            column = catalog.create_column(
                declared.id,
                name,
                data_type,
                is_required=required,
                default_value=default,
                max_length=max_length,
                position=position,
            )
    except TableSpineError as exc:
        raise fail(exc) from exc
    console.print(f"[green]Added column[/green] {table}.{column.name} ({column.data_type.value})")


@app.command("drop")
def drop_table(
    name: str = typer.Argument(..., help="Table name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    database: Database = None,
) -> None:
    """Delete a table and all of its records."""
    if not yes:
        typer.confirm(f"Delete table '{name}' and all of its records?", abort=True)
    try:
        with open_catalog(database) as catalog:
            table = catalog.get_table_by_name(name)
            catalog.delete_table(table.id)
    except TableSpineError as exc:
        raise fail(exc) from exc
    console.print(f"[yellow]Dropped table[/yellow] {name}")
