"""CRUD handlers bound to one registered table.

A :class:`CrudHandlers` instance pairs a :class:`TableBinding` snapshot with
the engine.  The binding is resolved once per request, so a request sees one
consistent set of columns and validators even while the catalog changes.

Responses are plain dicts shaped by the table's response descriptor; the
HTTP layer only wraps them in ``{"data": ...}``.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from tablespine.core.engine import PersistenceEngine
from tablespine.core.errors import NotFoundError, ValidationError
from tablespine.core.logging import get_logger
from tablespine.registry.records import RecordRepository

if TYPE_CHECKING:
    from tablespine.registry.endpoints import TableBinding

logger = get_logger(__name__)


class CrudHandlers:
    """List, get, create, update and delete records of one table."""

    def __init__(self, engine: PersistenceEngine, binding: TableBinding) -> None:
        self.engine = engine
        self.binding = binding

    @property
    def table(self) -> str:
        return self.binding.name

    def _records(self, db: Any) -> RecordRepository:
        return RecordRepository(db, self.table, self.binding.columns, self.engine.dialect)

    @contextmanager
    def _open(self, *, write: bool = False) -> Iterator[RecordRepository]:
        """Record access inside one read or write scope.

        The table is re-checked inside the scope: the binding was resolved
        before the scope was entered, and the table may have been dropped or
        rebuilt in between.
        """
        scope = self.engine.transaction() if write else self.engine.reading()
        try:
            with scope as db:
                if db.query_one(self.engine.dialect.table_exists_query(), (self.table,)) is None:
                    raise NotFoundError(f"Table '{self.table}'")
                yield self._records(db)
        except sqlite3.IntegrityError as exc:
            # a column declared after the binding was resolved
            raise ValidationError(
                f"Record does not satisfy the current columns of table '{self.table}'", cause=exc
            ) from exc
        except sqlite3.OperationalError as exc:
            if "no such column" not in str(exc):
                raise
            raise ValidationError(
                f"Columns of table '{self.table}' changed during the request", cause=exc
            ) from exc

    def _shape(self, row: dict[str, Any]) -> dict[str, Any]:
        return self.binding.validators.shape_response(row)

    def list(self, limit: int, offset: int) -> dict[str, Any]:
        """A page of records plus pagination metadata."""
        with self._open() as records:
            total = records.count()
            rows = records.list_page(limit, offset)
        return {
            "data": [self._shape(r) for r in rows],
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "hasMore": offset + len(rows) < total,
            },
        }

    def get(self, record_id: int) -> dict[str, Any]:
        with self._open() as records:
            row = records.get(record_id)
        if row is None:
            raise NotFoundError("Record")
        return self._shape(row)

    def create(self, payload: Any) -> dict[str, Any]:
        values = self.binding.validators.validate_create(payload)
        with self._open(write=True) as records:
            record_id = records.insert_record(values)
            row = records.get(record_id)
        logger.debug("record_created", table=self.table, record_id=record_id)
        return self._shape(row)

    def update(self, record_id: int, payload: Any) -> dict[str, Any]:
        values = self.binding.validators.validate_update(payload)
        with self._open(write=True) as records:
            if records.get(record_id) is None:
                raise NotFoundError("Record")
            records.update_record(record_id, values)
            row = records.get(record_id)
        logger.debug("record_updated", table=self.table, record_id=record_id, fields=sorted(values))
        return self._shape(row)

    def delete(self, record_id: int) -> None:
        with self._open(write=True) as records:
            if not records.delete_record(record_id):
                raise NotFoundError("Record")
        logger.debug("record_deleted", table=self.table, record_id=record_id)


__all__ = ["CrudHandlers"]
