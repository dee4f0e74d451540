"""SQL database layer: connections, statement execution, schema, and DAO implementations."""

from persistence.db.auth_dao import SqlAuthDAO
from persistence.db.connection import ConnectionProvider
from persistence.db.data_access import DataAccess
from persistence.db.executor import SqlParam, StatementExecutor
from persistence.db.game_dao import SqlGameDAO
from persistence.db.schema import SchemaBootstrapper
from persistence.db.user_dao import SqlUserDAO

__all__ = [
    "ConnectionProvider",
    "DataAccess",
    "SchemaBootstrapper",
    "SqlAuthDAO",
    "SqlGameDAO",
    "SqlParam",
    "SqlUserDAO",
    "StatementExecutor",
]
