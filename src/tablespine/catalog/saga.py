"""Catalog sagas: catalog mutation + physical DDL as one unit.

A saga runs inside one write transaction.  Each step registers a
compensation; when a later step fails, the compensations run in reverse
order and the transaction then rolls back, so the catalog and the physical
schema never diverge.

    begin → step(mutate-catalog) → step(mutate-physical) → commit
                                 ↘ failure → compensate (reverse) → rollback

Engine failures (``sqlite3.Error``) surface as
:class:`~tablespine.core.errors.InternalError` with the engine message kept
in ``cause``; domain errors propagate unchanged.

Usage::

    with run_saga(engine, "create_table", table="widgets") as saga:
        table_id = saga.step("insert_catalog_row", insert_row, delete_row)
        saga.step("create_physical_table", create_table, drop_table)

Tags:
    saga, compensation, transaction, catalog, table-spine
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from tablespine.core.engine import PersistenceEngine, Transaction
from tablespine.core.errors import InternalError
from tablespine.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Compensation = Callable[[Transaction], None]


class Saga:
    """Ordered steps with compensations, bound to one transaction."""

    def __init__(self, name: str, tx: Transaction, context: dict[str, Any]) -> None:
        self.name = name
        self.tx = tx
        self.context = context
        self.completed: list[str] = []
        self._compensations: list[tuple[str, Compensation]] = []

    def step(
        self,
        name: str,
        action: Callable[[Transaction], T],
        compensate: Compensation | None = None,
    ) -> T:
        """Run *action* and register *compensate* for it on success."""
        result = action(self.tx)
        self.completed.append(name)
        if compensate is not None:
            self._compensations.append((name, compensate))
        return result

    def compensate(self) -> None:
        """Run registered compensations in reverse order."""
        if not self._compensations:
            return
        for step_name, compensation in reversed(self._compensations):
            try:
                compensation(self.tx)
            except sqlite3.Error as exc:
                # the enclosing rollback still reverts this step
                logger.warning(
                    "saga_compensation_failed",
                    saga=self.name,
                    step=step_name,
                    error=str(exc),
                    **self.context,
                )
        logger.warning(
            "saga_compensated",
            saga=self.name,
            steps=[n for n, _ in reversed(self._compensations)],
            **self.context,
        )
        self._compensations.clear()


@contextmanager
def run_saga(engine: PersistenceEngine, name: str, **context: Any) -> Iterator[Saga]:
    """Open a transaction and yield a :class:`Saga` bound to it."""
    try:
        with engine.transaction() as tx:
            saga = Saga(name, tx, context)
            try:
                yield saga
            except BaseException:
                saga.compensate()
                raise
    except sqlite3.Error as exc:
        logger.error("saga_failed", saga=name, error=str(exc), **context)
        raise InternalError(cause=exc) from exc

    logger.debug("saga_committed", saga=name, steps=saga.completed, **context)


__all__ = ["Saga", "run_saga"]
