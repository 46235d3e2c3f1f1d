"""Persistence engine — single-writer SQLite store with snapshot durability.

The working database lives in an in-memory SQLite connection owned by the
engine.  It is loaded from a snapshot file at :meth:`PersistenceEngine.open`,
written back on an interval by a background thread, and after every
committed write.  Durability is best effort: a crash between a commit and
the next flush loses the unflushed changes.

Architecture::

    ┌──────────────────────────────────────────────────────────────┐
    │                     PersistenceEngine                        │
    │                                                              │
    │   ReadWriteLock   many readers | one writer                  │
    │   query()/query_one()      → shared lock                     │
    │   transaction()            → exclusive lock, BEGIN..COMMIT    │
    │       nested transaction() → SAVEPOINT on the same thread     │
    │   flush()                  → backup() to tmp file + replace   │
    │   _flush_loop (thread)     → flush() every flush_interval_s   │
    └──────────────────────────────────────────────────────────────┘

SQLite DDL is transactional, so a catalog insert and the matching
``CREATE TABLE`` inside one :meth:`transaction` commit or roll back together.

Usage::

    engine = PersistenceEngine("./data/app.db", flush_interval_s=5.0)
    engine.open()
    with engine.transaction() as tx:
        tx.execute('CREATE TABLE "t" (id INTEGER PRIMARY KEY)')
    rows = engine.query('SELECT * FROM "t"')
    engine.close()

Tags:
    persistence, sqlite, single-writer, snapshot, durability, table-spine
"""

from __future__ import annotations

import os
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from tablespine.core.dialect import SQLiteDialect
from tablespine.core.logging import get_logger

logger = get_logger(__name__)

MEMORY_PATHS = {":memory:", "memory", ""}


class ReadWriteLock:
    """Writer-exclusive, reader-shared lock.

    The writing thread may re-enter as writer or reader; other threads block
    until the write is released.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer: int | None = None
        self._writer_depth = 0
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                return
            while self._writer is not None or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                return
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._writer_depth += 1
                return
            self._writers_waiting += 1
            try:
                while self._writer is not None or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = me
            self._writer_depth = 1

    def release_write(self) -> None:
        with self._cond:
            self._writer_depth -= 1
            if self._writer_depth == 0:
                self._writer = None
                self._cond.notify_all()

    @property
    def write_held(self) -> bool:
        return self._writer == threading.get_ident()


class Transaction:
    """Handle for statements executed inside :meth:`PersistenceEngine.transaction`."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self._conn.execute(sql, params)

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        return [dict(row) for row in self._conn.execute(sql, params).fetchall()]

    def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        row = self._conn.execute(sql, params).fetchone()
        return dict(row) if row is not None else None


class PersistenceEngine:
    """Owner of the single logical connection.

    Parameters:
        path: Snapshot file.  ``None`` or ``":memory:"`` keeps everything in
              RAM with no flushing.
        flush_interval_s: Background flush period; ``0`` disables the thread.
        flush_on_write: Flush right after every committed top-level write.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        flush_interval_s: float = 5.0,
        flush_on_write: bool = True,
    ) -> None:
        if path is None or str(path) in MEMORY_PATHS:
            self.path: Path | None = None
        else:
            self.path = Path(path).expanduser()
        self.flush_interval_s = flush_interval_s
        self.flush_on_write = flush_on_write
        self.dialect = SQLiteDialect()

        self._conn: sqlite3.Connection | None = None
        self._lock = ReadWriteLock()
        self._flush_lock = threading.Lock()
        self._local = threading.local()
        self._dirty = False
        self._stop = threading.Event()
        self._flusher: threading.Thread | None = None

    # -- Lifecycle ---------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def persistent(self) -> bool:
        return self.path is not None

    def open(self) -> PersistenceEngine:
        """Open the in-memory database, loading the snapshot if one exists."""
        if self._conn is not None:
            return self

        conn = sqlite3.connect(":memory:", check_same_thread=False, isolation_level=None)
        conn.row_factory = sqlite3.Row

        if self.path is not None and self.path.exists():
            source = sqlite3.connect(str(self.path))
            try:
                source.backup(conn)
            finally:
                source.close()
            logger.info("snapshot_loaded", path=str(self.path))

        conn.execute("PRAGMA foreign_keys = ON")
        self._conn = conn

        if self.path is not None and self.flush_interval_s > 0:
            self._stop.clear()
            self._flusher = threading.Thread(
                target=self._flush_loop,
                name="tablespine-flusher",
                daemon=True,
            )
            self._flusher.start()

        logger.info(
            "engine_opened",
            path=str(self.path) if self.path else ":memory:",
            flush_interval_s=self.flush_interval_s,
        )
        return self

    def close(self) -> None:
        """Stop the flusher, write a final snapshot, and close."""
        if self._conn is None:
            return
        self._stop.set()
        if self._flusher is not None:
            self._flusher.join(timeout=max(self.flush_interval_s, 1.0) + 1.0)
            self._flusher = None
        self.flush()
        self._conn.close()
        self._conn = None
        logger.info("engine_closed")

    def __enter__(self) -> PersistenceEngine:
        return self.open()

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Persistence engine is not open")
        return self._conn

    # -- Reads -------------------------------------------------------------

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Run a SELECT under the shared lock and return rows as dicts."""
        conn = self._require_conn()
        self._lock.acquire_read()
        try:
            return [dict(row) for row in conn.execute(sql, params).fetchall()]
        finally:
            self._lock.release_read()

    def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    @contextmanager
    def reading(self) -> Iterator[Transaction]:
        """Hold the shared lock across several reads so they see one state."""
        conn = self._require_conn()
        self._lock.acquire_read()
        try:
            yield Transaction(conn)
        finally:
            self._lock.release_read()

    def table_exists(self, name: str) -> bool:
        return self.query_one(self.dialect.table_exists_query(), (name,)) is not None

    # -- Writes ------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Exclusive write transaction.

        The outermost call issues ``BEGIN IMMEDIATE``/``COMMIT``; calls nested
        on the same thread use a ``SAVEPOINT`` so an inner failure rolls back
        only the inner work when the caller handles it.
        """
        conn = self._require_conn()
        self._lock.acquire_write()
        depth = getattr(self._local, "depth", 0)
        savepoint = f"sp_{depth}"
        try:
            if depth == 0:
                conn.execute("BEGIN IMMEDIATE")
            else:
                conn.execute(f"SAVEPOINT {savepoint}")
            self._local.depth = depth + 1
            try:
                yield Transaction(conn)
            except BaseException:
                # sqlite may already have rolled back on its own
                if conn.in_transaction:
                    if depth == 0:
                        conn.execute("ROLLBACK")
                    else:
                        conn.execute(f"ROLLBACK TO SAVEPOINT {savepoint}")
                        conn.execute(f"RELEASE SAVEPOINT {savepoint}")
                raise
            else:
                if depth == 0:
                    conn.execute("COMMIT")
                    self._dirty = True
                else:
                    conn.execute(f"RELEASE SAVEPOINT {savepoint}")
            finally:
                self._local.depth = depth
        finally:
            self._lock.release_write()

        if depth == 0 and self.flush_on_write:
            self.flush()

    # -- Durability --------------------------------------------------------

    def flush(self) -> bool:
        """Write the in-memory database to the snapshot file.

        Returns ``True`` when a snapshot was written.  Skipped for in-memory
        engines, when nothing changed since the last flush, or when called
        from inside an open write transaction.
        """
        if self.path is None or self._conn is None or not self._dirty:
            return False
        if self._lock.write_held:
            return False

        with self._flush_lock:
            self._lock.acquire_read()
            try:
                if not self._dirty:
                    return False
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.path.with_name(self.path.name + ".tmp")
                target = sqlite3.connect(str(tmp_path))
                try:
                    self._conn.backup(target)
                finally:
                    target.close()
                os.replace(tmp_path, self.path)
                self._dirty = False
            finally:
                self._lock.release_read()

        logger.debug("snapshot_flushed", path=str(self.path))
        return True

    def _flush_loop(self) -> None:
        while not self._stop.wait(self.flush_interval_s):
            try:
                self.flush()
            except (OSError, sqlite3.Error) as exc:
                logger.error("snapshot_flush_failed", path=str(self.path), error=str(exc))

    def __repr__(self) -> str:
        target = str(self.path) if self.path else ":memory:"
        return f"PersistenceEngine({target!r}, open={self.is_open})"


__all__ = ["PersistenceEngine", "ReadWriteLock", "Transaction"]
