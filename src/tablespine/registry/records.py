"""Record access for one declared table.

Rows are projected onto the system columns plus the *declared* columns, so a
physical column that is not (or no longer) in the catalog is never read.
Booleans are stored as ``0``/``1`` and decoded back to ``bool``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tablespine.catalog.models import SYSTEM_COLUMNS, ColumnDeclaration, DataType
from tablespine.core.dialect import SQLiteDialect
from tablespine.core.repository import BaseRepository, Database
from tablespine.core.timestamps import utc_now_iso


class RecordRepository(BaseRepository):
    """CRUD SQL for the records of one user table."""

    def __init__(
        self,
        db: Database,
        table: str,
        columns: Sequence[ColumnDeclaration],
        dialect: SQLiteDialect | None = None,
    ) -> None:
        super().__init__(db, dialect)
        self.table = table
        self.columns = tuple(columns)
        self._types = {c.name: c.data_type for c in self.columns}
        names = [*SYSTEM_COLUMNS, *(c.name for c in self.columns)]
        self._select = f"SELECT {self.dialect.quote_identifiers(names)} FROM {self.q(table)}"

    # -- Encoding ----------------------------------------------------------

    def encode(self, values: dict[str, Any]) -> dict[str, Any]:
        encoded = {}
        for name, value in values.items():
            if isinstance(value, bool):
                value = int(value)
            encoded[name] = value
        return encoded

    def decode(self, row: dict[str, Any]) -> dict[str, Any]:
        for name, data_type in self._types.items():
            value = row.get(name)
            if value is None:
                continue
            if data_type is DataType.BOOLEAN:
                row[name] = bool(value)
            elif data_type is DataType.DECIMAL:
                row[name] = float(value)
        return row

    # -- Reads -------------------------------------------------------------

    def count(self) -> int:
        row = self.query_one(f"SELECT COUNT(*) AS n FROM {self.q(self.table)}")
        return row["n"] if row else 0

    def list_page(self, limit: int, offset: int) -> list[dict[str, Any]]:
        """One page, most recent first."""
        rows = self.query(
            f"{self._select} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [self.decode(r) for r in rows]

    def get(self, record_id: int) -> dict[str, Any] | None:
        row = self.query_one(f"{self._select} WHERE id = ?", (record_id,))
        return self.decode(row) if row else None

    # -- Writes ------------------------------------------------------------

    def insert_record(self, values: dict[str, Any]) -> int:
        now = utc_now_iso()
        return self.insert(self.table, {**self.encode(values), "created_at": now, "updated_at": now})

    def update_record(self, record_id: int, values: dict[str, Any]) -> int:
        """Apply *values* and always refresh ``updated_at``."""
        return self.update(self.table, record_id, {**self.encode(values), "updated_at": utc_now_iso()})

    def delete_record(self, record_id: int) -> int:
        return self.delete(self.table, record_id)


__all__ = ["RecordRepository"]
