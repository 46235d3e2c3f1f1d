"""SQL dialect for the persistence engine.

All SQL text that depends on the storage engine is produced here, so the
catalog, the schema mutator and the record repository never hand-build
engine-specific syntax.

Two routines matter most and are deliberately separate:

- :meth:`SQLiteDialect.quote_identifier` — the *only* place a table or
  column name is turned into SQL text.
- :meth:`SQLiteDialect.literal` — the *only* place a value is turned into SQL
  text, used solely for ``DEFAULT`` clauses where DDL cannot bind
  parameters.  Every DML value goes through placeholders instead.

Examples:
    >>> d = SQLiteDialect()
    >>> d.quote_identifier("widgets")
    '"widgets"'
    >>> d.placeholders(3)
    '?, ?, ?'
    >>> d.literal("it's")
    "'it''s'"

Guardrails:
    ❌ DON'T: f-string a name into SQL without ``quote_identifier``
    ✅ DO: quote names, bind values

Tags:
    dialect, sql, quoting, sqlite, table-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any


class SQLiteDialect:
    """SQLite dialect — ``?`` placeholders, double-quoted identifiers."""

    @property
    def name(self) -> str:
        return "sqlite"

    # -- Identifiers -------------------------------------------------------

    def quote_identifier(self, identifier: str) -> str:
        """Quote a table or column name.

        Names are already grammar-constrained by the catalog; quoting still
        escapes embedded quotes so a future grammar change cannot open an
        injection path.
        """
        if not identifier or "\x00" in identifier:
            raise ValueError(f"Invalid SQL identifier: {identifier!r}")
        return '"' + identifier.replace('"', '""') + '"'

    def quote_identifiers(self, identifiers: list[str]) -> str:
        return ", ".join(self.quote_identifier(i) for i in identifiers)

    # -- Placeholders ------------------------------------------------------

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    # -- Literals (DDL only) -----------------------------------------------

    def literal(self, value: Any) -> str:
        """Render a Python scalar as a SQL literal for a ``DEFAULT`` clause."""
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return self.boolean_true() if value else self.boolean_false()
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return repr(value)
        text = str(value)
        return "'" + text.replace("'", "''") + "'"

    def boolean_true(self) -> str:
        return "1"

    def boolean_false(self) -> str:
        return "0"

    # -- DDL helpers -------------------------------------------------------

    def auto_increment(self) -> str:
        return "INTEGER PRIMARY KEY AUTOINCREMENT"

    def timestamp_default_now(self) -> str:
        return "DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))"

    def table_exists_query(self) -> str:
        return "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?"


__all__ = ["SQLiteDialect"]
