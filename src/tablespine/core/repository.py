"""Base repository with dialect-aware database access.

Pairs a database handle with the :class:`~tablespine.core.dialect.SQLiteDialect`
so catalog and record repositories build SQL through one set of helpers.

The handle is either the :class:`~tablespine.core.engine.PersistenceEngine`
(reads under the shared lock) or a
:class:`~tablespine.core.engine.Transaction` (reads and writes inside the
exclusive write transaction).

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                       BaseRepository                               │
    │                                                                    │
    │   db: Database            ← engine or transaction                  │
    │   dialect: SQLiteDialect                                           │
    │                                                                    │
    │   execute(sql, params)     → cursor   (transaction only)           │
    │   query(sql, params)       → list[dict]                            │
    │   query_one(sql, params)   → dict | None                           │
    │   insert(table, data)      → new rowid                             │
    │   update(table, id, data)  → rows changed                          │
    └────────────────────────────────────────────────────────────────────┘

Tags:
    repository, database, dialect, table-spine
"""

from __future__ import annotations

from typing import Any, Protocol

from tablespine.core.dialect import SQLiteDialect


class Database(Protocol):
    """Anything that can answer queries: the engine or an open transaction."""

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]: ...

    def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None: ...


class BaseRepository:
    """Dialect-aware base class for data-access repositories."""

    def __init__(self, db: Database, dialect: SQLiteDialect | None = None) -> None:
        self.db = db
        self.dialect = dialect or SQLiteDialect()

    # -- Convenience shortcuts ---------------------------------------------

    def ph(self, count: int) -> str:
        """Shortcut for ``self.dialect.placeholders(count)``."""
        return self.dialect.placeholders(count)

    def q(self, identifier: str) -> str:
        """Shortcut for ``self.dialect.quote_identifier(identifier)``."""
        return self.dialect.quote_identifier(identifier)

    # -- Query helpers -----------------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute a statement.  Requires a transaction handle."""
        execute = getattr(self.db, "execute", None)
        if execute is None:
            raise RuntimeError(f"{type(self).__name__} is read-only outside a transaction")
        return execute(sql, params)

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        return self.db.query(sql, params)

    def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        return self.db.query_one(sql, params)

    # -- Write helpers -----------------------------------------------------

    def insert(self, table: str, data: dict[str, Any]) -> int:
        """Insert a single row from a dict and return its rowid.

        Column names come from ``data.keys()`` and are quoted; values are
        bound via placeholders.
        """
        columns = list(data.keys())
        sql = (
            f"INSERT INTO {self.q(table)} ({self.dialect.quote_identifiers(columns)}) "
            f"VALUES ({self.ph(len(columns))})"
        )
        return self.execute(sql, tuple(data.values())).lastrowid

    def update(self, table: str, row_id: int, data: dict[str, Any]) -> int:
        """Update one row by ``id`` and return the number of rows changed."""
        if not data:
            return 0
        assignments = ", ".join(f"{self.q(col)} = ?" for col in data)
        sql = f"UPDATE {self.q(table)} SET {assignments} WHERE id = ?"
        return self.execute(sql, (*data.values(), row_id)).rowcount

    def delete(self, table: str, row_id: int) -> int:
        """Delete one row by ``id`` and return the number of rows removed."""
        return self.execute(f"DELETE FROM {self.q(table)} WHERE id = ?", (row_id,)).rowcount


__all__ = ["BaseRepository", "Database"]
