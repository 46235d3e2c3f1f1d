"""Tests for the persistence engine and its readers/writer lock."""

from __future__ import annotations

import sqlite3
import threading
import time

import pytest

from tablespine.core.engine import PersistenceEngine, ReadWriteLock


@pytest.fixture
def mem_engine():
    eng = PersistenceEngine(None, flush_interval_s=0).open()
    yield eng
    eng.close()


class TestLifecycle:
    def test_memory_paths(self):
        for path in (None, ":memory:", ""):
            assert PersistenceEngine(path).persistent is False

    def test_open_close(self):
        eng = PersistenceEngine(None, flush_interval_s=0)
        assert not eng.is_open
        eng.open()
        assert eng.is_open
        eng.close()
        assert not eng.is_open

    def test_query_requires_open(self):
        with pytest.raises(RuntimeError):
            PersistenceEngine(None).query("SELECT 1")

    def test_context_manager(self):
        with PersistenceEngine(None, flush_interval_s=0) as eng:
            assert eng.query_one("SELECT 1 AS one") == {"one": 1}
        assert not eng.is_open


class TestTransactions:
    def test_commit(self, mem_engine):
        with mem_engine.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER)")
            tx.execute("INSERT INTO t VALUES (1)")
        assert mem_engine.query("SELECT v FROM t") == [{"v": 1}]

    def test_rollback_includes_ddl(self, mem_engine):
        with pytest.raises(ValueError):
            with mem_engine.transaction() as tx:
                tx.execute("CREATE TABLE t (v INTEGER)")
                raise ValueError("boom")
        assert not mem_engine.table_exists("t")

    def test_nested_failure_rolls_back_inner_only(self, mem_engine):
        with mem_engine.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER)")
            tx.execute("INSERT INTO t VALUES (1)")
            with pytest.raises(ValueError):
                with mem_engine.transaction() as inner:
                    inner.execute("INSERT INTO t VALUES (2)")
                    raise ValueError("inner")
            tx.execute("INSERT INTO t VALUES (3)")
        assert [r["v"] for r in mem_engine.query("SELECT v FROM t ORDER BY v")] == [1, 3]

    def test_reads_inside_write_do_not_deadlock(self, mem_engine):
        with mem_engine.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER)")
            assert mem_engine.table_exists("t")

    def test_engine_error_propagates_and_rolls_back(self, mem_engine):
        with mem_engine.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER NOT NULL)")
        with pytest.raises(sqlite3.IntegrityError):
            with mem_engine.transaction() as tx:
                tx.execute("INSERT INTO t VALUES (1)")
                tx.execute("INSERT INTO t VALUES (NULL)")
        assert mem_engine.query("SELECT v FROM t") == []

    def test_reading_scope(self, mem_engine):
        with mem_engine.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER)")
            tx.execute("INSERT INTO t VALUES (7)")
        with mem_engine.reading() as db:
            assert db.query_one("SELECT COUNT(*) AS n FROM t") == {"n": 1}
            assert db.query("SELECT v FROM t") == [{"v": 7}]


class TestSnapshot:
    def test_flush_and_reload(self, tmp_path):
        path = tmp_path / "app.db"
        eng = PersistenceEngine(path, flush_interval_s=0, flush_on_write=False).open()
        with eng.transaction() as tx:
            tx.execute("CREATE TABLE t (v TEXT)")
            tx.execute("INSERT INTO t VALUES ('kept')")
        assert not path.exists()
        assert eng.flush() is True
        assert path.exists()
        assert eng.flush() is False  # nothing new
        eng.close()

        reopened = PersistenceEngine(path, flush_interval_s=0).open()
        assert reopened.query("SELECT v FROM t") == [{"v": "kept"}]
        reopened.close()

    def test_flush_on_write(self, tmp_path):
        path = tmp_path / "nested" / "app.db"
        eng = PersistenceEngine(path, flush_interval_s=0).open()
        with eng.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER)")
        assert path.exists()
        assert not path.with_name("app.db.tmp").exists()
        eng.close()

    def test_close_flushes(self, tmp_path):
        path = tmp_path / "app.db"
        eng = PersistenceEngine(path, flush_interval_s=0, flush_on_write=False).open()
        with eng.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER)")
        eng.close()
        check = sqlite3.connect(str(path))
        assert check.execute("SELECT name FROM sqlite_master WHERE name = 't'").fetchone()
        check.close()

    def test_background_flusher(self, tmp_path):
        path = tmp_path / "app.db"
        eng = PersistenceEngine(path, flush_interval_s=0.05, flush_on_write=False).open()
        with eng.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER)")
        deadline = time.monotonic() + 5
        while not path.exists() and time.monotonic() < deadline:
            time.sleep(0.02)
        assert path.exists()
        eng.close()

    def test_memory_engine_never_flushes(self, mem_engine):
        with mem_engine.transaction() as tx:
            tx.execute("CREATE TABLE t (v INTEGER)")
        assert mem_engine.flush() is False


class TestReadWriteLock:
    def test_writer_reentrant(self):
        lock = ReadWriteLock()
        lock.acquire_write()
        lock.acquire_write()
        assert lock.write_held
        lock.release_write()
        assert lock.write_held
        lock.release_write()
        assert not lock.write_held

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        lock.acquire_read()
        acquired = threading.Event()

        def writer():
            lock.acquire_write()
            acquired.set()
            lock.release_write()

        t = threading.Thread(target=writer)
        t.start()
        assert not acquired.wait(0.1)
        lock.release_read()
        assert acquired.wait(2)
        t.join()

    def test_readers_share(self):
        lock = ReadWriteLock()
        lock.acquire_read()
        done = threading.Event()

        def reader():
            lock.acquire_read()
            done.set()
            lock.release_read()

        t = threading.Thread(target=reader)
        t.start()
        assert done.wait(2)
        t.join()
        lock.release_read()
