import psycopg2
import pytest

from srg_reports.engine.errors import SourceError
from srg_reports.utils import db
from srg_reports.utils.db import PostgresRecordSource


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=None):
        if params is None:
            return
        self.conn.executed.append((query, params))
        if self.conn.errors:
            raise self.conn.errors.pop(0)

    def fetchall(self):
        return self.conn.rows


class FakeConnection:
    def __init__(self, rows=None, errors=None):
        self.rows = rows or []
        self.errors = list(errors or [])
        self.executed = []
        self.commits = self.rollbacks = self.closes = 0

    def cursor(self, cursor_factory=None):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closes += 1


def _source(conn):
    return PostgresRecordSource(connection_factory=lambda: conn, prefix="mdl_")


def test_fetch_query_filters_with_any_and_orders_by_id():
    query, params = _source(None).build_fetch_query(
        "logstore_standard_log", {"userid": [5], "courseid": [3]}, ["id", "timecreated"]
    )
    text = repr(query)
    assert "Identifier('mdl_logstore_standard_log')" in text
    assert "ORDER BY" in text
    assert params == [[5], [3]]


def test_fetch_query_without_filters():
    query, params = _source(None).build_fetch_query("course", {}, ["shortname"])
    assert params == []
    assert "WHERE" not in repr(query)
    assert "ORDER BY" not in repr(query)


def test_fetch_returns_plain_dicts():
    conn = FakeConnection(rows=[{"id": 1, "badgeid": 7}])
    rows = _source(conn).fetch("badge_issued", {"userid": [5]}, ["id", "badgeid"])

    assert rows == [{"id": 1, "badgeid": 7}]
    assert conn.executed[0][1] == [[5]]
    assert (conn.commits, conn.closes) == (1, 1)


def test_fetch_by_keys_coerces_numeric_text_and_indexes_rows():
    conn = FakeConnection(rows=[{"id": 7, "name": "X"}, {"id": 8, "name": "Y"}])
    result = _source(conn).fetch_by_keys("badge", "id", ["7", 8, " 9 "], ["name"])

    assert conn.executed[0][1] == [[7, 8, 9]]
    assert result == {7: {"id": 7, "name": "X"}, 8: {"id": 8, "name": "Y"}}


def test_fetch_by_keys_without_keys_skips_the_query():
    conn = FakeConnection()
    assert _source(conn).fetch_by_keys("badge", "id", [], ["name"]) == {}
    assert conn.executed == []


def test_driver_error_becomes_source_error(capsys):
    conn = FakeConnection(errors=[psycopg2.ProgrammingError('relation "mdl_hvp" does not exist')])

    with pytest.raises(SourceError) as exc:
        _source(conn).fetch("hvp", {}, ["id"])

    assert exc.value.table == "hvp"
    assert conn.rollbacks == 1
    assert "[DB ERROR] hvp" in capsys.readouterr().out


def test_lock_errors_are_retried(monkeypatch):
    monkeypatch.setattr(db.time, "sleep", lambda seconds: None)
    conn = FakeConnection(rows=[{"id": 1}], errors=[psycopg2.OperationalError("canceling statement due to lock timeout")])

    assert _source(conn).fetch("course", {"id": [1]}, ["id"]) == [{"id": 1}]
    assert len(conn.executed) == 2


def test_missing_credentials(monkeypatch):
    monkeypatch.delenv("MOODLE_DB_HOST", raising=False)
    with pytest.raises(ValueError):
        db.get_db_connection()
