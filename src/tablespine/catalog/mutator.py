"""
Schema mutator: catalog declarations → physical DDL.

Every statement runs on the caller's :class:`~tablespine.core.engine.Transaction`,
so the mutator never commits on its own; the catalog saga decides.

Type map::

    string, text      → TEXT
    number            → INTEGER
    decimal           → REAL
    boolean           → INTEGER   (0 / 1)
    date, datetime    → TEXT      (canonical ISO-8601)

Every physical table owns::

    id          INTEGER PRIMARY KEY AUTOINCREMENT
    created_at  TEXT NOT NULL DEFAULT <now>
    updated_at  TEXT NOT NULL DEFAULT <now>

Manifesto:
    - **Quoted identifiers only:** names go through ``quote_identifier``
    - **Literals only in DEFAULT:** values elsewhere are bound parameters
    - **No silent data loss:** a rebuild is refused once rows exist

Tags:
    ddl, schema, sqlite, mutator, table-spine
"""

from __future__ import annotations

from collections.abc import Sequence

from tablespine.catalog.models import ColumnDeclaration, DataType
from tablespine.core.dialect import SQLiteDialect
from tablespine.core.engine import Transaction
from tablespine.core.errors import PolicyViolation
from tablespine.core.logging import get_logger

logger = get_logger(__name__)

PHYSICAL_TYPES: dict[DataType, str] = {
    DataType.STRING: "TEXT",
    DataType.TEXT: "TEXT",
    DataType.NUMBER: "INTEGER",
    DataType.DECIMAL: "REAL",
    DataType.BOOLEAN: "INTEGER",
    DataType.DATE: "TEXT",
    DataType.DATETIME: "TEXT",
}


class SchemaMutator:
    """Translate table and column declarations into DDL."""

    def __init__(self, dialect: SQLiteDialect | None = None) -> None:
        self.dialect = dialect or SQLiteDialect()

    # -- Fragments ---------------------------------------------------------

    def column_definition(self, column: ColumnDeclaration) -> str:
        """``"name" TYPE [NOT NULL] [DEFAULT literal]``"""
        parts = [self.dialect.quote_identifier(column.name), PHYSICAL_TYPES[column.data_type]]
        if column.is_required:
            parts.append("NOT NULL")
        default = column.default
        if default is not None:
            parts.append(f"DEFAULT {self.dialect.literal(default)}")
        return " ".join(parts)

    def create_table_sql(self, name: str, columns: Sequence[ColumnDeclaration] = ()) -> str:
        now = self.dialect.timestamp_default_now()
        definitions = [
            f"id {self.dialect.auto_increment()}",
            f"created_at TEXT NOT NULL {now}",
            f"updated_at TEXT NOT NULL {now}",
            *(self.column_definition(c) for c in columns),
        ]
        body = ",\n    ".join(definitions)
        return f"CREATE TABLE {self.dialect.quote_identifier(name)} (\n    {body}\n)"

    # -- Tables ------------------------------------------------------------

    def create_table(self, tx: Transaction, name: str) -> None:
        tx.execute(self.create_table_sql(name))
        logger.debug("physical_table_created", table=name)

    def drop_table(self, tx: Transaction, name: str) -> None:
        tx.execute(f"DROP TABLE IF EXISTS {self.dialect.quote_identifier(name)}")
        logger.debug("physical_table_dropped", table=name)

    def physical_columns(self, tx: Transaction, name: str) -> list[str]:
        rows = tx.query(f"PRAGMA table_info({self.dialect.quote_identifier(name)})")
        return [r["name"] for r in rows]

    def row_count(self, tx: Transaction, name: str) -> int:
        row = tx.query_one(f"SELECT COUNT(*) AS n FROM {self.dialect.quote_identifier(name)}")
        return row["n"] if row else 0

    # -- Columns -----------------------------------------------------------

    def add_column(
        self,
        tx: Transaction,
        table: str,
        column: ColumnDeclaration,
        existing: Sequence[ColumnDeclaration] = (),
    ) -> None:
        """Add *column* to *table*.

        ``ALTER TABLE ADD COLUMN`` cannot add ``NOT NULL`` without a default,
        so a required column with no default rebuilds the table instead.
        That is only allowed while the table is empty.
        """
        if column.is_unique:
            raise PolicyViolation("Unique columns are not supported")

        if column.is_required and column.default_value is None:
            if self.row_count(tx, table) > 0:
                raise PolicyViolation(
                    f"Cannot add required column '{column.name}' without a default value "
                    f"to table '{table}' because it already contains records"
                )
            self.rebuild_table(tx, table, [*existing, column])
            return

        tx.execute(
            f"ALTER TABLE {self.dialect.quote_identifier(table)} "
            f"ADD COLUMN {self.column_definition(column)}"
        )
        logger.debug("physical_column_added", table=table, column=column.name)

    def drop_column(self, tx: Transaction, table: str, column: str) -> None:
        if column not in self.physical_columns(tx, table):
            return
        tx.execute(
            f"ALTER TABLE {self.dialect.quote_identifier(table)} "
            f"DROP COLUMN {self.dialect.quote_identifier(column)}"
        )
        logger.debug("physical_column_dropped", table=table, column=column)

    def rebuild_table(
        self,
        tx: Transaction,
        table: str,
        columns: Sequence[ColumnDeclaration],
    ) -> None:
        """Recreate *table* with *columns*, copying the rows that fit.

        The autoincrement counter is carried over so ids are never reused.
        """
        q = self.dialect.quote_identifier
        staging = f"_rebuild_{table}"

        tx.execute(self.create_table_sql(staging, columns))
        target = set(self.physical_columns(tx, staging))
        shared = [c for c in self.physical_columns(tx, table) if c in target]
        cols = self.dialect.quote_identifiers(shared)
        tx.execute(f"INSERT INTO {q(staging)} ({cols}) SELECT {cols} FROM {q(table)}")

        seq = tx.query_one("SELECT seq FROM sqlite_sequence WHERE name = ?", (table,))
        tx.execute(f"DROP TABLE {q(table)}")
        tx.execute(f"ALTER TABLE {q(staging)} RENAME TO {q(table)}")
        tx.execute("DELETE FROM sqlite_sequence WHERE name = ?", (table,))
        if seq is not None:
            tx.execute("INSERT INTO sqlite_sequence (name, seq) VALUES (?, ?)", (table, seq["seq"]))

        logger.info("physical_table_rebuilt", table=table, columns=len(columns))


__all__ = ["PHYSICAL_TYPES", "SchemaMutator"]
