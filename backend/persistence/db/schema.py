"""Idempotent database and table creation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from persistence.db.connection import ConnectionProvider
    from persistence.db.executor import StatementExecutor

logger = structlog.get_logger()

# No table declares a foreign key, so creation order does not matter.
CREATE_STATEMENTS: tuple[str, ...] = (
    """\
CREATE TABLE IF NOT EXISTS `user` (
    `username` varchar(256) NOT NULL,
    `password` varchar(256) NOT NULL,
    `email` varchar(256) NOT NULL,
    `json` TEXT DEFAULT NULL,
    PRIMARY KEY (`username`)
)""",
    """\
CREATE TABLE IF NOT EXISTS `auth` (
    `authToken` varchar(256) NOT NULL,
    `username` varchar(256) NOT NULL,
    `json` TEXT DEFAULT NULL,
    PRIMARY KEY (`authToken`)
)""",
    """\
CREATE TABLE IF NOT EXISTS `game` (
    `gameID` int NOT NULL,
    `whiteUsername` varchar(256) DEFAULT NULL,
    `blackUsername` varchar(256) DEFAULT NULL,
    `gameName` varchar(256) NOT NULL,
    `jsonChessGame` TEXT DEFAULT NULL,
    `json` TEXT DEFAULT NULL,
    PRIMARY KEY (`gameID`)
)""",
)

TABLE_NAMES: tuple[str, ...] = ("user", "auth", "game")


class SchemaBootstrapper:
    """Create the database and its tables when they are missing.

    Every operation is safe to run on each process start against a database
    that is already initialized.
    """

    def __init__(self, connections: ConnectionProvider, executor: StatementExecutor) -> None:
        self._connections = connections
        self._executor = executor

    def create_database_if_absent(self) -> None:
        statement, params = self._connections.create_database_statement()
        self._executor.execute(statement, params, select_catalog=False)

    def ensure_schema(self) -> None:
        for statement in CREATE_STATEMENTS:
            self._executor.execute(statement)

    def configure_database(self) -> None:
        """Create the database, then the user, auth, and game tables."""
        self.create_database_if_absent()
        self.ensure_schema()
        self._connections.harden_permissions()
        logger.info(
            "database schema ready",
            driver=self._connections.driver,
            database=self._connections.database_name,
            tables=list(TABLE_NAMES),
        )
