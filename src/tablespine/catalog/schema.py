"""System catalog DDL.

Two system tables hold the declarations.  They are created idempotently at
startup by :func:`ensure_catalog_schema`; user tables can never shadow them
because their names are reserved.
"""

from __future__ import annotations

from tablespine.core.engine import PersistenceEngine
from tablespine.core.logging import get_logger

logger = get_logger(__name__)

TABLES_TABLE = "tables"
COLUMNS_TABLE = "columns"

_NOW = "(strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))"

CATALOG_DDL: tuple[str, ...] = (
    f"""
    CREATE TABLE IF NOT EXISTS tables (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        display_name TEXT,
        created_at TEXT NOT NULL DEFAULT {_NOW},
        updated_at TEXT NOT NULL DEFAULT {_NOW}
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS columns (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        table_id INTEGER NOT NULL REFERENCES tables(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        display_name TEXT,
        data_type TEXT NOT NULL,
        is_required INTEGER NOT NULL DEFAULT 0,
        is_unique INTEGER NOT NULL DEFAULT 0,
        default_value TEXT,
        max_length INTEGER,
        position INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL DEFAULT {_NOW},
        UNIQUE (table_id, name)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tables_name ON tables(name)",
    "CREATE INDEX IF NOT EXISTS idx_columns_table_id ON columns(table_id)",
)


def ensure_catalog_schema(engine: PersistenceEngine) -> None:
    """Create the system catalog tables if they are missing."""
    if engine.table_exists(TABLES_TABLE) and engine.table_exists(COLUMNS_TABLE):
        return
    with engine.transaction() as tx:
        for statement in CATALOG_DDL:
            tx.execute(statement)
    logger.info("catalog_schema_created")


__all__ = ["CATALOG_DDL", "COLUMNS_TABLE", "TABLES_TABLE", "ensure_catalog_schema"]
