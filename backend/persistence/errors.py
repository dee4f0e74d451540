"""Error taxonomy for the persistence layer.

Absence of a row is not an error: read operations return None for that.
Everything here is an infrastructure failure the caller renders as a server
error using status_code.
"""

from __future__ import annotations

SERVER_ERROR_STATUS = 500


class DataAccessError(Exception):
    """Base class for persistence failures."""

    def __init__(self, message: str, status_code: int = SERVER_ERROR_STATUS) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConfigurationError(DataAccessError):
    """Connection settings are missing or malformed."""


class DatabaseConnectionError(DataAccessError):
    """The driver could not establish a session."""


class StatementError(DataAccessError):
    """A statement failed to prepare, bind, or execute."""

    def __init__(
        self,
        message: str,
        status_code: int = SERVER_ERROR_STATUS,
        driver_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.driver_code = driver_code


class ConstraintViolationError(StatementError):
    """A statement violated a table constraint (duplicate key, NOT NULL)."""


class CorruptRowError(DataAccessError):
    """A stored row could not be decoded into its entity (malformed JSON column)."""

    def __init__(self, message: str, key: str | int, status_code: int = SERVER_ERROR_STATUS) -> None:
        super().__init__(message, status_code)
        self.key = key
