"""Short-lived database connections for the configured backend."""

from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pymysql
import structlog
from pymysql.constants import CLIENT

from persistence.errors import DatabaseConnectionError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import ModuleType

    from persistence.settings import DatabaseSettings

logger = structlog.get_logger()

_DB_FILE_PERMISSIONS = 0o600
_SQLITE_BUSY_TIMEOUT_MS = 5000


class ConnectionProvider:
    """Open one connection per operation against the configured database.

    Connections are never pooled or shared. Every caller gets a fresh session
    from ``connect()`` and it is closed when the block exits, whether the
    block finished or raised.

        with provider.connect() as conn:
            ...
    """

    def __init__(self, settings: DatabaseSettings) -> None:
        self._settings = settings

    @property
    def driver(self) -> str:
        return self._settings.driver

    @property
    def database_name(self) -> str:
        return self._settings.name

    @property
    def dbapi(self) -> ModuleType:
        """The DB-API module backing the configured driver."""
        return pymysql if self.driver == "mysql" else sqlite3

    @property
    def paramstyle(self) -> str:
        return self.dbapi.paramstyle

    @contextmanager
    def connect(self, *, select_catalog: bool = True) -> Iterator[Any]:
        """Yield a connection, closing it on every exit path.

        With select_catalog=False the session is not bound to the configured
        database, which is what CREATE DATABASE needs.
        """
        conn = self._open(select_catalog=select_catalog)
        try:
            yield conn
        finally:
            conn.close()

    def create_database_statement(self) -> tuple[str, tuple[str, ...]]:
        """Return the driver-specific statement that creates the database if absent."""
        if self.driver == "mysql":
            # name is validated as [A-Za-z0-9_]+ by DatabaseSettings
            return f"CREATE DATABASE IF NOT EXISTS `{self.database_name}`", ()
        # Attaching a sqlite file creates it when missing.
        return "ATTACH DATABASE ? AS bootstrap", (str(self._settings.sqlite_path),)

    def harden_permissions(self) -> None:
        """Restrict the sqlite database files to the owner (best effort).

        The WAL and SHM siblings hold database content too, including
        password hashes, so they are covered as well.
        """
        if self.driver != "sqlite" or os.name != "posix":  # pragma: no cover
            return
        base = str(self._settings.sqlite_path)
        for suffix in ("", "-wal", "-shm"):
            p = Path(base + suffix)
            if p.exists():
                try:
                    p.chmod(_DB_FILE_PERMISSIONS)
                except OSError:
                    logger.warning("could not set file permissions", permissions=oct(_DB_FILE_PERMISSIONS), path=str(p))

    def _open(self, *, select_catalog: bool) -> Any:
        try:
            if self.driver == "mysql":
                return self._open_mysql(select_catalog=select_catalog)
            return self._open_sqlite(select_catalog=select_catalog)
        except (self.dbapi.Error, OSError) as exc:
            logger.warning(
                "database connection failed",
                driver=self.driver,
                database=self.database_name,
                error=str(exc),
            )
            msg = f"Unable to connect to database '{self.database_name}': {exc}"
            raise DatabaseConnectionError(msg) from exc

    def _open_mysql(self, *, select_catalog: bool) -> pymysql.connections.Connection:
        s = self._settings
        conn = pymysql.connect(
            host=s.host,
            port=s.port,
            user=s.user,
            password=s.password,
            connect_timeout=s.connect_timeout,
            charset="utf8mb4",
            # UPDATE reports matched rows, not just changed ones
            client_flag=CLIENT.FOUND_ROWS,
        )
        if select_catalog:
            try:
                conn.select_db(s.name)
            except BaseException:
                conn.close()
                raise
        return conn

    def _open_sqlite(self, *, select_catalog: bool) -> sqlite3.Connection:
        path = self._settings.sqlite_path
        path.parent.mkdir(parents=True, exist_ok=True)
        target = str(path) if select_catalog else ":memory:"
        conn = sqlite3.connect(target, timeout=self._settings.connect_timeout)
        conn.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
        return conn
