"""Tests for the SQLite dialect."""

from __future__ import annotations

import sqlite3

import pytest

from tablespine.core.dialect import SQLiteDialect


@pytest.fixture
def sqlite() -> SQLiteDialect:
    return SQLiteDialect()


class TestIdentifiers:
    def test_quotes_plain_name(self, sqlite):
        assert sqlite.quote_identifier("widgets") == '"widgets"'

    def test_escapes_embedded_quote(self, sqlite):
        assert sqlite.quote_identifier('we"ird') == '"we""ird"'

    @pytest.mark.parametrize("bad", ["", "a\x00b"])
    def test_rejects_unusable(self, sqlite, bad):
        with pytest.raises(ValueError):
            sqlite.quote_identifier(bad)

    def test_quote_identifiers_joins(self, sqlite):
        assert sqlite.quote_identifiers(["a", "b"]) == '"a", "b"'

    def test_quoted_keyword_is_usable(self, sqlite):
        conn = sqlite3.connect(":memory:")
        conn.execute(f"CREATE TABLE {sqlite.quote_identifier('order')} ({sqlite.quote_identifier('select')} TEXT)")
        conn.execute('INSERT INTO "order" VALUES (?)', ("x",))
        assert conn.execute('SELECT "select" FROM "order"').fetchone() == ("x",)


class TestPlaceholders:
    def test_placeholder(self, sqlite):
        assert sqlite.placeholder(1) == "?"

    def test_placeholders(self, sqlite):
        assert sqlite.placeholders(3) == "?, ?, ?"


class TestLiteral:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "NULL"),
            (True, "1"),
            (False, "0"),
            (0, "0"),
            (-12, "-12"),
            (1.5, "1.5"),
            ("plain", "'plain'"),
            ("it's", "'it''s'"),
            ("", "''"),
        ],
    )
    def test_literal(self, sqlite, value, expected):
        assert sqlite.literal(value) == expected

    def test_literal_survives_as_default(self, sqlite):
        conn = sqlite3.connect(":memory:")
        hostile = "'); DROP TABLE t; --"
        conn.execute(f"CREATE TABLE t (id INTEGER, note TEXT DEFAULT {sqlite.literal(hostile)})")
        conn.execute("INSERT INTO t (id) VALUES (1)")
        assert conn.execute("SELECT note FROM t").fetchone() == (hostile,)


class TestDDLHelpers:
    def test_auto_increment(self, sqlite):
        assert sqlite.auto_increment() == "INTEGER PRIMARY KEY AUTOINCREMENT"

    def test_timestamp_default_renders_z(self, sqlite):
        conn = sqlite3.connect(":memory:")
        conn.execute(f"CREATE TABLE t (id INTEGER, ts TEXT {sqlite.timestamp_default_now()})")
        conn.execute("INSERT INTO t (id) VALUES (1)")
        (ts,) = conn.execute("SELECT ts FROM t").fetchone()
        assert ts.endswith("Z") and "T" in ts

    def test_table_exists_query(self, sqlite):
        conn = sqlite3.connect(":memory:")
        conn.execute("CREATE TABLE present (id INTEGER)")
        assert conn.execute(sqlite.table_exists_query(), ("present",)).fetchone() is not None
        assert conn.execute(sqlite.table_exists_query(), ("absent",)).fetchone() is None
