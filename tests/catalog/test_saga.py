"""Tests for catalog sagas."""

from __future__ import annotations

import pytest

from tablespine.catalog.saga import run_saga
from tablespine.core.errors import InternalError, PolicyViolation


class TestRunSaga:
    def test_commit(self, engine):
        with run_saga(engine, "demo") as saga:
            saga.step("create", lambda tx: tx.execute("CREATE TABLE t (v INTEGER)"))
            saga.step("insert", lambda tx: tx.execute("INSERT INTO t VALUES (1)"))
        assert saga.completed == ["create", "insert"]
        assert engine.query("SELECT v FROM t") == [{"v": 1}]

    def test_step_returns_action_result(self, engine):
        with run_saga(engine, "demo") as saga:
            assert saga.step("answer", lambda tx: 42) == 42

    def test_compensations_run_in_reverse(self, engine):
        order = []
        with pytest.raises(PolicyViolation):
            with run_saga(engine, "demo") as saga:
                saga.step("a", lambda tx: None, lambda tx: order.append("undo-a"))
                saga.step("b", lambda tx: None, lambda tx: order.append("undo-b"))
                raise PolicyViolation("stop")
        assert order == ["undo-b", "undo-a"]

    def test_engine_error_becomes_internal(self, engine):
        undone = []
        with pytest.raises(InternalError) as info:
            with run_saga(engine, "demo") as saga:
                saga.step("create", lambda tx: tx.execute("CREATE TABLE t (v INTEGER)"),
                          lambda tx: undone.append(True))
                saga.step("broken", lambda tx: tx.execute("CREATE TABLE t (v INTEGER)"))
        assert undone == [True]
        assert info.value.cause is not None
        assert "already exists" not in info.value.message
        assert not engine.table_exists("t")
