"""Tests for StatementExecutor and parameter binding."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from unittest.mock import MagicMock

import pymysql
import pytest

from persistence.db.executor import StatementExecutor, bind_params
from persistence.errors import ConstraintViolationError, StatementError


class _FakeProvider:
    """Hands out a single MagicMock connection and records its lifecycle."""

    def __init__(self, dbapi=sqlite3) -> None:
        self.dbapi = dbapi
        self.paramstyle = dbapi.paramstyle
        self.conn = MagicMock()
        self.cursor = self.conn.cursor.return_value
        self.cursor.rowcount = 1
        self.opened = 0
        self.closed = 0

    @contextmanager
    def connect(self, *, select_catalog: bool = True):
        self.opened += 1
        try:
            yield self.conn
        finally:
            self.closed += 1


@pytest.fixture
def executor(data):
    return data.executor


class TestBindParams:
    def test_accepts_text_integer_and_null(self) -> None:
        assert bind_params(["alice", 7, None]) == ("alice", 7, None)

    def test_empty(self) -> None:
        assert bind_params([]) == ()

    @pytest.mark.parametrize(
        ("value", "kind"),
        [(1.5, "float"), (b"raw", "bytes"), (["a"], "list"), ({"a": 1}, "dict")],
    )
    def test_rejects_unsupported_kinds(self, value, kind) -> None:
        with pytest.raises(TypeError, match=f"position 2: {kind}"):
            bind_params(["ok", value])

    def test_rejects_bool(self) -> None:
        with pytest.raises(TypeError, match="position 1: bool"):
            bind_params([True])


class TestExecute:
    def test_returns_affected_row_count(self, executor: StatementExecutor) -> None:
        executor.execute("INSERT INTO `user` VALUES (?, ?, ?, ?)", ("alice", "pw", "a@x.io", None))
        executor.execute("INSERT INTO `user` VALUES (?, ?, ?, ?)", ("bob", "pw", "b@x.io", None))
        assert executor.execute("UPDATE `user` SET `email` = ?", ("all@x.io",)) == 2

    def test_changes_are_committed(self, executor: StatementExecutor) -> None:
        executor.execute("INSERT INTO `user` VALUES (?, ?, ?, ?)", ("alice", "pw", "a@x.io", None))
        assert executor.fetch_one("SELECT `email` FROM `user` WHERE `username` = ?", ("alice",)) == ("a@x.io",)

    def test_null_is_stored_as_sql_null(self, executor: StatementExecutor) -> None:
        executor.execute("INSERT INTO `auth` VALUES (?, ?, ?)", ("t1", "alice", None))
        row = executor.fetch_one("SELECT `json` IS NULL FROM `auth` WHERE `authToken` = ?", ("t1",))
        assert row == (1,)

    def test_integer_is_stored_as_numeric(self, executor: StatementExecutor) -> None:
        executor.execute("INSERT INTO `game` (`gameID`, `gameName`) VALUES (?, ?)", (42, "g"))
        assert executor.fetch_one("SELECT `gameID` + 1 FROM `game`") == (43,)

    def test_syntax_error_raises_statement_error(self, executor: StatementExecutor) -> None:
        with pytest.raises(StatementError) as exc_info:
            executor.execute("INSERT INTO nowhere VALUES (?)", ("x",))
        assert exc_info.value.status_code == 500
        assert "nowhere" in exc_info.value.message
        assert exc_info.value.driver_code is not None
        assert not isinstance(exc_info.value, ConstraintViolationError)

    def test_duplicate_key_raises_constraint_violation(self, executor: StatementExecutor) -> None:
        executor.execute("INSERT INTO `auth` VALUES (?, ?, ?)", ("t1", "alice", None))
        with pytest.raises(ConstraintViolationError) as exc_info:
            executor.execute("INSERT INTO `auth` VALUES (?, ?, ?)", ("t1", "bob", None))
        assert isinstance(exc_info.value, StatementError)
        assert exc_info.value.status_code == 500

    def test_unsupported_param_fails_before_connecting(self) -> None:
        provider = _FakeProvider()
        executor = StatementExecutor(provider)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            executor.execute("UPDATE t SET x = ?", (3.14,))
        assert provider.opened == 0


class TestResourceRelease:
    def test_connection_and_cursor_closed_on_success(self) -> None:
        provider = _FakeProvider()
        StatementExecutor(provider).execute("DELETE FROM t WHERE x = ?", ("a",))  # type: ignore[arg-type]
        assert provider.closed == 1
        provider.cursor.close.assert_called_once()
        provider.conn.commit.assert_called_once()

    def test_failed_write_is_rolled_back_and_released(self) -> None:
        provider = _FakeProvider()
        provider.cursor.execute.side_effect = sqlite3.OperationalError("disk I/O error")
        with pytest.raises(StatementError, match="disk I/O error"):
            StatementExecutor(provider).execute("DELETE FROM t")  # type: ignore[arg-type]
        provider.conn.rollback.assert_called_once()
        provider.conn.commit.assert_not_called()
        provider.cursor.close.assert_called_once()
        assert provider.closed == 1

    def test_failed_query_is_released(self) -> None:
        provider = _FakeProvider()
        provider.cursor.execute.side_effect = sqlite3.OperationalError("no such table: t")
        with pytest.raises(StatementError):
            StatementExecutor(provider).fetch_all("SELECT * FROM t")  # type: ignore[arg-type]
        provider.cursor.close.assert_called_once()
        assert provider.closed == 1


class TestFormatParamstyle:
    def test_placeholders_rewritten_for_mysql(self) -> None:
        provider = _FakeProvider(dbapi=pymysql)
        StatementExecutor(provider).execute(  # type: ignore[arg-type]
            "UPDATE `user` SET `email` = ? WHERE `username` = ?",
            ("a@x.io", "alice"),
        )
        provider.cursor.execute.assert_called_once_with(
            "UPDATE `user` SET `email` = %s WHERE `username` = %s",
            ("a@x.io", "alice"),
        )

    def test_mysql_error_code_and_message(self) -> None:
        provider = _FakeProvider(dbapi=pymysql)
        provider.cursor.execute.side_effect = pymysql.err.IntegrityError(
            1062, "Duplicate entry 'alice' for key 'PRIMARY'"
        )
        with pytest.raises(ConstraintViolationError) as exc_info:
            StatementExecutor(provider).execute("INSERT INTO `user` VALUES (?)", ("alice",))  # type: ignore[arg-type]
        assert exc_info.value.driver_code == 1062
        assert exc_info.value.message == "Duplicate entry 'alice' for key 'PRIMARY'"


class TestFetch:
    def test_fetch_one_returns_none_when_no_rows(self, executor: StatementExecutor) -> None:
        assert executor.fetch_one("SELECT `username` FROM `user` WHERE `username` = ?", ("ghost",)) is None

    def test_fetch_all_returns_tuples(self, executor: StatementExecutor) -> None:
        executor.execute("INSERT INTO `auth` VALUES (?, ?, ?)", ("t1", "alice", None))
        executor.execute("INSERT INTO `auth` VALUES (?, ?, ?)", ("t2", "alice", None))
        rows = executor.fetch_all("SELECT `authToken` FROM `auth` ORDER BY `authToken`")
        assert rows == [("t1",), ("t2",)]
