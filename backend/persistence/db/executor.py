"""Parameterized statement execution over short-lived connections.

Every statement the DAOs issue goes through StatementExecutor. SQL text is
written with ``?`` placeholders and caller values are always bound, never
formatted into the text.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any

import structlog

from persistence.errors import ConstraintViolationError, StatementError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from persistence.db.connection import ConnectionProvider

logger = structlog.get_logger()

type SqlParam = str | int | None

_FORMAT_PARAMSTYLES = {"format", "pyformat"}


def bind_params(params: Sequence[SqlParam]) -> tuple[SqlParam, ...]:
    """Check every parameter is text, an integer, or None.

    Anything else raises TypeError naming its 1-based position. bool is
    rejected even though it subclasses int.
    """
    for position, value in enumerate(params, start=1):
        match value:
            case bool():
                raise TypeError(f"Unsupported SQL parameter at position {position}: bool")
            case str() | int() | None:
                continue
            case _:
                raise TypeError(f"Unsupported SQL parameter at position {position}: {type(value).__name__}")
    return tuple(params)


def _driver_code(exc: Exception) -> int | None:
    code = getattr(exc, "sqlite_errorcode", None)
    if code is None and exc.args and isinstance(exc.args[0], int):
        code = exc.args[0]
    return code


def _driver_message(exc: Exception) -> str:
    # PyMySQL errors carry (code, message); sqlite3 carries (message,)
    if len(exc.args) > 1:
        return str(exc.args[1])
    return str(exc)


class StatementExecutor:
    """Run bound statements, each on its own connection."""

    def __init__(self, connections: ConnectionProvider) -> None:
        self._connections = connections

    def execute(
        self,
        statement: str,
        params: Sequence[SqlParam] = (),
        *,
        select_catalog: bool = True,
    ) -> int:
        """Execute a write statement and commit it. Returns the affected row count."""
        bound = bind_params(params)
        sql = self._native(statement)
        with self._connections.connect(select_catalog=select_catalog) as conn:
            try:
                with contextlib.closing(conn.cursor()) as cursor:
                    cursor.execute(sql, bound)
                    rowcount = cursor.rowcount
                conn.commit()
            except self._connections.dbapi.Error as exc:
                with contextlib.suppress(self._connections.dbapi.Error):
                    conn.rollback()
                raise self._wrap(exc, statement) from exc
        logger.debug("statement executed", statement=statement, rowcount=rowcount)
        return rowcount

    def fetch_one(self, statement: str, params: Sequence[SqlParam] = ()) -> tuple[Any, ...] | None:
        """Run a query and return its first row, or None when nothing matched."""
        rows = self._query(statement, params, limit=1)
        return rows[0] if rows else None

    def fetch_all(self, statement: str, params: Sequence[SqlParam] = ()) -> list[tuple[Any, ...]]:
        return self._query(statement, params)

    def _query(
        self,
        statement: str,
        params: Sequence[SqlParam],
        limit: int | None = None,
    ) -> list[tuple[Any, ...]]:
        bound = bind_params(params)
        sql = self._native(statement)
        with self._connections.connect() as conn:
            try:
                with contextlib.closing(conn.cursor()) as cursor:
                    cursor.execute(sql, bound)
                    rows = cursor.fetchall() if limit is None else cursor.fetchmany(limit)
            except self._connections.dbapi.Error as exc:
                raise self._wrap(exc, statement) from exc
        return [tuple(row) for row in rows]

    def _native(self, statement: str) -> str:
        if self._connections.paramstyle in _FORMAT_PARAMSTYLES:
            return statement.replace("?", "%s")
        return statement

    def _wrap(self, exc: Exception, statement: str) -> StatementError:
        code = _driver_code(exc)
        message = _driver_message(exc)
        logger.warning("statement failed", statement=statement, driver_code=code, error=message)
        if isinstance(exc, self._connections.dbapi.IntegrityError):
            return ConstraintViolationError(message, driver_code=code)
        return StatementError(message, driver_code=code)
