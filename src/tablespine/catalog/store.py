"""
Catalog store: authoritative table and column declarations.

Every mutating operation validates its inputs first, then runs one
:func:`~tablespine.catalog.saga.run_saga` that writes the catalog row and
applies the matching physical DDL through the
:class:`~tablespine.catalog.mutator.SchemaMutator`.  After the saga commits,
a :class:`CatalogEvent` is delivered to every subscriber; the endpoint
registry uses these to keep the data surface in step with the catalog.

Architecture::

    create_table ─┐
    delete_table  │   validate ─► run_saga ─┬─ CatalogRepository (rows)
    create_column │                          └─ SchemaMutator (DDL)
    update_column │                 commit ─► publish(CatalogEvent)
    delete_column ┘

Column changes that would need a physical migration (rename, retype,
required/default/unique changes) are refused with
:class:`~tablespine.core.errors.PolicyViolation`; ``update_column`` only
touches catalog-only attributes.

Tags:
    catalog, store, saga, events, table-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tablespine.catalog.models import (
    ColumnDeclaration,
    DataType,
    TableDeclaration,
    format_default,
    parse_default,
    validate_column_name,
    validate_table_name,
)
from tablespine.catalog.mutator import SchemaMutator
from tablespine.catalog.repository import CatalogRepository
from tablespine.catalog.saga import run_saga
from tablespine.core.engine import PersistenceEngine
from tablespine.core.errors import (
    DuplicateError,
    NotFoundError,
    PolicyViolation,
    ValidationError,
)
from tablespine.core.logging import get_logger
from tablespine.core.timestamps import utc_now_iso

logger = get_logger(__name__)

MAX_DISPLAY_NAME_LENGTH = 100

# Attributes update_column may change without touching the physical table
CATALOG_ONLY_ATTRIBUTES = frozenset({"display_name", "position", "max_length"})
# Attributes whose change would need a physical migration
PHYSICAL_ATTRIBUTES = frozenset({"name", "data_type", "is_required", "is_unique", "default_value"})


class CatalogEventKind(str, Enum):
    TABLE_CREATED = "table.created"
    TABLE_DELETED = "table.deleted"
    COLUMN_CREATED = "column.created"
    COLUMN_UPDATED = "column.updated"
    COLUMN_DELETED = "column.deleted"


@dataclass(frozen=True, slots=True)
class CatalogEvent:
    """Notification that a committed catalog mutation changed *table*."""

    kind: CatalogEventKind
    table: TableDeclaration
    column: ColumnDeclaration | None = None


CatalogListener = Callable[[CatalogEvent], None]


def _check_display_name(display_name: str | None) -> None:
    if display_name is not None and len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValidationError(
            f"Display name must be {MAX_DISPLAY_NAME_LENGTH} characters or less"
        )


def _check_max_length(data_type: DataType, max_length: int | None) -> None:
    if max_length is None:
        return
    if not data_type.is_text:
        raise ValidationError(
            f"max_length only applies to string and text columns, not '{data_type.value}'"
        )
    if max_length < 1:
        raise ValidationError("max_length must be at least 1")


def _normalize_default(data_type: DataType, raw: Any, max_length: int | None) -> str | None:
    """Catalog text for a declared default, checked against its type."""
    if raw is None:
        return None
    try:
        value = parse_default(data_type, raw)
    except ValueError as exc:
        raise ValidationError(
            f"Default value {raw!r} is not a valid {data_type.value}"
        ) from exc
    if max_length is not None and isinstance(value, str) and len(value) > max_length:
        raise ValidationError(f"Default value exceeds max_length of {max_length}")
    return format_default(value)


class CatalogStore:
    """Table and column declarations backed by the persistence engine.

    Parameters:
        engine: Open persistence engine holding the catalog tables.
        mutator: DDL generator; defaults to one built on the engine dialect.
        drop_physical_columns: Drop the physical column when a column is
            deleted.  When ``False`` the physical column is left in place and
            only hidden by projection.
    """

    def __init__(
        self,
        engine: PersistenceEngine,
        mutator: SchemaMutator | None = None,
        *,
        drop_physical_columns: bool = True,
    ) -> None:
        self.engine = engine
        self.mutator = mutator or SchemaMutator(engine.dialect)
        self.drop_physical_columns = drop_physical_columns
        self._listeners: dict[str, CatalogListener] = {}
        self._listeners_lock = threading.Lock()

    def _reader(self) -> CatalogRepository:
        return CatalogRepository(self.engine, self.engine.dialect)

    # -- Events ------------------------------------------------------------

    def subscribe(self, listener: CatalogListener) -> str:
        """Register *listener* for catalog events and return its id."""
        sub_id = f"sub_{uuid.uuid4().hex[:12]}"
        with self._listeners_lock:
            self._listeners[sub_id] = listener
        return sub_id

    def unsubscribe(self, subscription_id: str) -> None:
        with self._listeners_lock:
            self._listeners.pop(subscription_id, None)

    def _publish(self, event: CatalogEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners.items())
        for sub_id, listener in listeners:
            try:
                listener(event)
            except Exception as exc:
                logger.warning(
                    "event_handler_error",
                    subscription_id=sub_id,
                    event_type=event.kind.value,
                    table=event.table.name,
                    error=str(exc),
                )

    # -- Tables ------------------------------------------------------------

    def list_tables(self) -> list[TableDeclaration]:
        """All tables, most recently created first."""
        return self._reader().list_tables()

    def get_table(self, table_id: int) -> TableDeclaration:
        table = self._reader().get_table(table_id)
        if table is None:
            raise NotFoundError("Table")
        return table

    def get_table_by_name(self, name: str) -> TableDeclaration:
        table = self._reader().get_table_by_name(name)
        if table is None:
            raise NotFoundError(f"Table '{name}'")
        return table

    def create_table(self, name: str, display_name: str | None = None) -> TableDeclaration:
        """Declare a table and create its physical counterpart."""
        validate_table_name(name)
        _check_display_name(display_name)
        now = utc_now_iso()

        with run_saga(self.engine, "create_table", table=name) as saga:
            repo = CatalogRepository(saga.tx, self.engine.dialect)
            if repo.get_table_by_name(name, ignore_case=True) is not None:
                raise DuplicateError("Table", name)

            table_id = saga.step(
                "insert_catalog_row",
                lambda tx: repo.insert_table(name, display_name, now),
                lambda tx: repo.delete_table_by_name(name),
            )
            saga.step(
                "create_physical_table",
                lambda tx: self.mutator.create_table(tx, name),
                lambda tx: self.mutator.drop_table(tx, name),
            )
            table = repo.get_table(table_id)

        logger.info("table_created", table=name, table_id=table.id)
        self._publish(CatalogEvent(CatalogEventKind.TABLE_CREATED, table))
        return table

    def delete_table(self, table_id: int) -> TableDeclaration:
        """Drop the physical table and its catalog row; columns cascade."""
        with run_saga(self.engine, "delete_table", table_id=table_id) as saga:
            repo = CatalogRepository(saga.tx, self.engine.dialect)
            table = repo.get_table(table_id)
            if table is None:
                raise NotFoundError("Table")
            # rollback restores both steps, no explicit compensation
            saga.step("drop_physical_table", lambda tx: self.mutator.drop_table(tx, table.name))
            saga.step("delete_catalog_row", lambda tx: repo.delete_table(table_id))

        logger.info("table_deleted", table=table.name, table_id=table_id)
        self._publish(CatalogEvent(CatalogEventKind.TABLE_DELETED, table))
        return table

    # -- Columns -----------------------------------------------------------

    def list_columns(self, table_id: int) -> list[ColumnDeclaration]:
        """Columns of a table in presentation order."""
        repo = self._reader()
        if repo.get_table(table_id) is None:
            raise NotFoundError("Table")
        return repo.list_columns(table_id)

    def get_column(self, column_id: int) -> ColumnDeclaration:
        column = self._reader().get_column(column_id)
        if column is None:
            raise NotFoundError("Column")
        return column

    def create_column(
        self,
        table_id: int,
        name: str,
        data_type: DataType | str,
        *,
        display_name: str | None = None,
        is_required: bool = False,
        is_unique: bool = False,
        default_value: Any = None,
        max_length: int | None = None,
        position: int = 0,
    ) -> ColumnDeclaration:
        """Declare a column and add it to the physical table.

        Raises:
            ValidationError: bad name, type, default or max_length
            PolicyViolation: ``is_unique=True``, or a required column without
                a default on a table that already holds records
            NotFoundError: unknown table
            DuplicateError: name taken within the table
        """
        validate_column_name(name)
        try:
            data_type = DataType(data_type)
        except ValueError as exc:
            allowed = ", ".join(t.value for t in DataType)
            raise ValidationError(
                f"Invalid data type '{data_type}'. Must be one of: {allowed}"
            ) from exc
        if is_unique:
            raise PolicyViolation("Unique constraints are not supported for columns")
        _check_display_name(display_name)
        _check_max_length(data_type, max_length)
        if position < 0:
            raise ValidationError("position must be zero or greater")
        stored_default = _normalize_default(data_type, default_value, max_length)
        now = utc_now_iso()

        with run_saga(self.engine, "create_column", table_id=table_id, column=name) as saga:
            repo = CatalogRepository(saga.tx, self.engine.dialect)
            table = repo.get_table(table_id)
            if table is None:
                raise NotFoundError("Table")
            if repo.get_column_by_name(table_id, name, ignore_case=True) is not None:
                raise DuplicateError("Column", name)
            existing = repo.list_columns(table_id)

            column_id = saga.step(
                "insert_catalog_row",
                lambda tx: repo.insert_column({
                    "table_id": table_id,
                    "name": name,
                    "display_name": display_name,
                    "data_type": data_type.value,
                    "is_required": int(is_required),
                    "is_unique": 0,
                    "default_value": stored_default,
                    "max_length": max_length,
                    "position": position,
                    "created_at": now,
                }),
                lambda tx: repo.delete_column_by_name(table_id, name),
            )
            column = repo.get_column(column_id)
            saga.step(
                "add_physical_column",
                lambda tx: self.mutator.add_column(tx, table.name, column, existing),
                lambda tx: self.mutator.drop_column(tx, table.name, name),
            )
            repo.touch_table(table_id, now)
            table = repo.get_table(table_id)

        logger.info(
            "column_added",
            table=table.name,
            column=name,
            data_type=data_type.value,
            required=is_required,
        )
        self._publish(CatalogEvent(CatalogEventKind.COLUMN_CREATED, table, column))
        return column

    def update_column(self, column_id: int, changes: dict[str, Any]) -> ColumnDeclaration:
        """Apply catalog-only changes to a column.

        Physical attributes may be sent unchanged (a full-object PUT); any
        actual change to them raises :class:`PolicyViolation`.
        """
        unknown = set(changes) - CATALOG_ONLY_ATTRIBUTES - PHYSICAL_ATTRIBUTES
        if unknown:
            raise ValidationError(f"Unknown column attributes: {', '.join(sorted(unknown))}")

        with run_saga(self.engine, "update_column", column_id=column_id) as saga:
            repo = CatalogRepository(saga.tx, self.engine.dialect)
            column = repo.get_column(column_id)
            if column is None:
                raise NotFoundError("Column")

            for attribute in sorted(PHYSICAL_ATTRIBUTES & set(changes)):
                # null means unchanged, except for default_value where it means "no default"
                if changes[attribute] is None and attribute != "default_value":
                    continue
                if self._changes_physical(column, attribute, changes[attribute]):
                    raise PolicyViolation(
                        f"Changing '{attribute}' of column '{column.name}' requires a "
                        "physical migration and is not supported"
                    )

            updates = {k: v for k, v in changes.items() if k in CATALOG_ONLY_ATTRIBUTES}
            if "display_name" in updates:
                _check_display_name(updates["display_name"])
            if "max_length" in updates:
                _check_max_length(column.data_type, updates["max_length"])
                limit = updates["max_length"]
                if limit is not None and column.default_value is not None and len(column.default_value) > limit:
                    raise ValidationError(f"Default value exceeds max_length of {limit}")
            if "position" in updates:
                if updates["position"] is None or updates["position"] < 0:
                    raise ValidationError("position must be zero or greater")

            if updates:
                repo.update_column(column_id, updates)
                repo.touch_table(column.table_id, utc_now_iso())
            column = repo.get_column(column_id)
            table = repo.get_table(column.table_id)

        logger.info("column_updated", table=table.name, column=column.name, changed=sorted(updates))
        self._publish(CatalogEvent(CatalogEventKind.COLUMN_UPDATED, table, column))
        return column

    @staticmethod
    def _changes_physical(column: ColumnDeclaration, attribute: str, value: Any) -> bool:
        if attribute == "name":
            return value != column.name
        if attribute == "data_type":
            return value != column.data_type.value
        if attribute == "is_required":
            return bool(value) != column.is_required
        if attribute == "is_unique":
            return bool(value)
        # default_value
        return _normalize_default(column.data_type, value, None) != column.default_value

    def delete_column(self, column_id: int) -> ColumnDeclaration:
        """Remove a column from the catalog and, by default, the physical table."""
        with run_saga(self.engine, "delete_column", column_id=column_id) as saga:
            repo = CatalogRepository(saga.tx, self.engine.dialect)
            column = repo.get_column(column_id)
            if column is None:
                raise NotFoundError("Column")
            table = repo.get_table(column.table_id)

            saga.step("delete_catalog_row", lambda tx: repo.delete_column(column_id))
            # a NOT NULL column without default left behind would reject every insert
            blocks_inserts = column.is_required and column.default_value is None
            if self.drop_physical_columns or blocks_inserts:
                saga.step(
                    "drop_physical_column",
                    lambda tx: self.mutator.drop_column(tx, table.name, column.name),
                )
            repo.touch_table(table.id, utc_now_iso())
            table = repo.get_table(table.id)

        logger.info(
            "column_dropped",
            table=table.name,
            column=column.name,
            physical=self.drop_physical_columns or blocks_inserts,
        )
        self._publish(CatalogEvent(CatalogEventKind.COLUMN_DELETED, table, column))
        return column


__all__ = [
    "CATALOG_ONLY_ATTRIBUTES",
    "PHYSICAL_ATTRIBUTES",
    "CatalogEvent",
    "CatalogEventKind",
    "CatalogListener",
    "CatalogStore",
]
