"""Catalog repository: SQL over the ``tables`` and ``columns`` system tables.

Pure data access.  Naming rules, policy checks and physical DDL live in
:class:`~tablespine.catalog.store.CatalogStore`.
"""

from __future__ import annotations

from typing import Any

from tablespine.catalog.models import ColumnDeclaration, TableDeclaration
from tablespine.catalog.schema import COLUMNS_TABLE, TABLES_TABLE
from tablespine.core.repository import BaseRepository


class CatalogRepository(BaseRepository):
    """Reads and writes table and column declarations."""

    # -- Tables ------------------------------------------------------------

    def list_tables(self) -> list[TableDeclaration]:
        rows = self.query(f"SELECT * FROM {TABLES_TABLE} ORDER BY created_at DESC, id DESC")
        return [TableDeclaration.from_row(r) for r in rows]

    def get_table(self, table_id: int) -> TableDeclaration | None:
        row = self.query_one(f"SELECT * FROM {TABLES_TABLE} WHERE id = ?", (table_id,))
        return TableDeclaration.from_row(row) if row else None

    def get_table_by_name(self, name: str, *, ignore_case: bool = False) -> TableDeclaration | None:
        collate = " COLLATE NOCASE" if ignore_case else ""
        row = self.query_one(f"SELECT * FROM {TABLES_TABLE} WHERE name = ?{collate}", (name,))
        return TableDeclaration.from_row(row) if row else None

    def insert_table(self, name: str, display_name: str | None, now: str) -> int:
        return self.insert(
            TABLES_TABLE,
            {"name": name, "display_name": display_name, "created_at": now, "updated_at": now},
        )

    def touch_table(self, table_id: int, now: str) -> None:
        self.update(TABLES_TABLE, table_id, {"updated_at": now})

    def delete_table(self, table_id: int) -> int:
        return self.delete(TABLES_TABLE, table_id)

    def delete_table_by_name(self, name: str) -> int:
        return self.execute(f"DELETE FROM {TABLES_TABLE} WHERE name = ?", (name,)).rowcount

    def count_tables(self) -> int:
        row = self.query_one(f"SELECT COUNT(*) AS n FROM {TABLES_TABLE}")
        return row["n"] if row else 0

    # -- Columns -----------------------------------------------------------

    def list_columns(self, table_id: int) -> list[ColumnDeclaration]:
        rows = self.query(
            f"SELECT * FROM {COLUMNS_TABLE} WHERE table_id = ? ORDER BY position, id",
            (table_id,),
        )
        return [ColumnDeclaration.from_row(r) for r in rows]

    def get_column(self, column_id: int) -> ColumnDeclaration | None:
        row = self.query_one(f"SELECT * FROM {COLUMNS_TABLE} WHERE id = ?", (column_id,))
        return ColumnDeclaration.from_row(row) if row else None

    def get_column_by_name(
        self, table_id: int, name: str, *, ignore_case: bool = False
    ) -> ColumnDeclaration | None:
        collate = " COLLATE NOCASE" if ignore_case else ""
        row = self.query_one(
            f"SELECT * FROM {COLUMNS_TABLE} WHERE table_id = ? AND name = ?{collate}",
            (table_id, name),
        )
        return ColumnDeclaration.from_row(row) if row else None

    def insert_column(self, data: dict[str, Any]) -> int:
        return self.insert(COLUMNS_TABLE, data)

    def update_column(self, column_id: int, changes: dict[str, Any]) -> int:
        return self.update(COLUMNS_TABLE, column_id, changes)

    def delete_column(self, column_id: int) -> int:
        return self.delete(COLUMNS_TABLE, column_id)

    def delete_column_by_name(self, table_id: int, name: str) -> int:
        return self.execute(
            f"DELETE FROM {COLUMNS_TABLE} WHERE table_id = ? AND name = ?",
            (table_id, name),
        ).rowcount


__all__ = ["CatalogRepository"]
