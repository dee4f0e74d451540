"""SQL-backed auth token DAO."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

from persistence.dal.auth_dao import AuthDAO
from persistence.dal.models import AuthData
from persistence.db.json_columns import decode_json, encode_json
from persistence.errors import ConstraintViolationError, CorruptRowError

if TYPE_CHECKING:
    from persistence.db.executor import StatementExecutor

logger = structlog.get_logger()

MAX_CREATE_ATTEMPTS = 3


class SqlAuthDAO(AuthDAO):
    """Auth token DAO over the `auth` table.

    Each login gets its own random token, so one user can hold several at
    once. The owning username is not a declared foreign key.
    """

    def __init__(self, executor: StatementExecutor) -> None:
        self._executor = executor

    def create_auth(self, username: str, metadata: dict[str, Any] | None = None) -> AuthData:
        """Issue a fresh token for username, retrying if it collides with an existing one."""
        attempt = 0
        while True:
            attempt += 1
            auth = AuthData(auth_token=str(uuid4()), username=username, metadata=metadata)
            try:
                self._executor.execute(
                    "INSERT INTO `auth` (`authToken`, `username`, `json`) VALUES (?, ?, ?)",
                    (auth.auth_token, auth.username, encode_json(auth.metadata)),
                )
            except ConstraintViolationError:
                if attempt >= MAX_CREATE_ATTEMPTS:
                    raise
                logger.warning("auth token collision, retrying", username=username, attempt=attempt)
            else:
                logger.info("auth token issued", username=username)
                return auth

    def get_auth(self, auth_token: str) -> AuthData | None:
        row = self._executor.fetch_one(
            "SELECT `authToken`, `username`, `json` FROM `auth` WHERE `authToken` = ?",
            (auth_token,),
        )
        if row is None:
            return None
        token, username, metadata = row
        try:
            decoded = decode_json(metadata)
        except ValueError as exc:
            # The token itself is a credential; only the owner is logged.
            logger.warning("undecodable auth metadata", username=username, error=str(exc))
            raise CorruptRowError("Stored auth token metadata could not be decoded", key=token) from exc
        return AuthData(auth_token=token, username=username, metadata=decoded)

    def delete_auth(self, auth_token: str) -> None:
        self._executor.execute("DELETE FROM `auth` WHERE `authToken` = ?", (auth_token,))

    def delete_user_auths(self, username: str) -> int:
        """Revoke every token held by username. Returns how many were removed."""
        removed = self._executor.execute("DELETE FROM `auth` WHERE `username` = ?", (username,))
        if removed:
            logger.info("revoked auth tokens", username=username, count=removed)
        return removed

    def clear(self) -> None:
        self._executor.execute("DELETE FROM `auth`")
        logger.info("auth table cleared")
