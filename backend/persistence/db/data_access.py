"""Wiring of the connection provider, executor, bootstrapper, and DAOs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from persistence.db.auth_dao import SqlAuthDAO
from persistence.db.connection import ConnectionProvider
from persistence.db.executor import StatementExecutor
from persistence.db.game_dao import SqlGameDAO
from persistence.db.schema import SchemaBootstrapper
from persistence.db.user_dao import SqlUserDAO

if TYPE_CHECKING:
    from persistence.settings import DatabaseSettings


@dataclass(frozen=True)
class DataAccess:
    """Everything the request layer needs, built from one settings object."""

    connections: ConnectionProvider
    executor: StatementExecutor
    schema: SchemaBootstrapper
    users: SqlUserDAO
    auths: SqlAuthDAO
    games: SqlGameDAO

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> DataAccess:
        connections = ConnectionProvider(settings)
        executor = StatementExecutor(connections)
        return cls(
            connections=connections,
            executor=executor,
            schema=SchemaBootstrapper(connections, executor),
            users=SqlUserDAO(executor),
            auths=SqlAuthDAO(executor),
            games=SqlGameDAO(executor),
        )

    def clear_all(self) -> None:
        """Delete every user, auth token, and game."""
        self.auths.clear()
        self.games.clear()
        self.users.clear()
