"""SQL-backed user DAO."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from persistence.dal.models import User
from persistence.dal.user_dao import UserDAO
from persistence.db.json_columns import decode_json, encode_json
from persistence.errors import CorruptRowError

if TYPE_CHECKING:
    from persistence.db.executor import StatementExecutor

logger = structlog.get_logger()

_SELECT_COLUMNS = "SELECT `username`, `password`, `email`, `json` FROM `user`"


def _user_from_row(row: tuple[Any, ...]) -> User:
    username, password, email, profile = row
    try:
        decoded = decode_json(profile)
    except ValueError as exc:
        logger.warning("undecodable user profile", username=username, error=str(exc))
        raise CorruptRowError(f"Stored profile for user {username!r} could not be decoded", key=username) from exc
    return User(username=username, password=password, email=email, profile=decoded)


class SqlUserDAO(UserDAO):
    """User DAO over the `user` table.

    Duplicate usernames are rejected by the primary key, so create_user raises
    ConstraintViolationError instead of overwriting an existing account.
    """

    def __init__(self, executor: StatementExecutor) -> None:
        self._executor = executor

    def create_user(
        self,
        username: str,
        password: str,
        email: str,
        profile: dict[str, Any] | None = None,
    ) -> User:
        user = User(username=username, password=password, email=email, profile=profile)
        self._executor.execute(
            "INSERT INTO `user` (`username`, `password`, `email`, `json`) VALUES (?, ?, ?, ?)",
            (user.username, user.password, user.email, encode_json(user.profile)),
        )
        logger.info("user created", username=username)
        return user

    def get_user(self, username: str) -> User | None:
        row = self._executor.fetch_one(f"{_SELECT_COLUMNS} WHERE `username` = ?", (username,))
        if row is None:
            return None
        return _user_from_row(row)

    def update_user(self, user: User) -> bool:
        """Overwrite password, email, and profile. Returns False when the user does not exist."""
        rowcount = self._executor.execute(
            "UPDATE `user` SET `password` = ?, `email` = ?, `json` = ? WHERE `username` = ?",
            (user.password, user.email, encode_json(user.profile), user.username),
        )
        return rowcount > 0

    def delete_user(self, username: str) -> None:
        self._executor.execute("DELETE FROM `user` WHERE `username` = ?", (username,))

    def clear(self) -> None:
        self._executor.execute("DELETE FROM `user`")
        logger.info("user table cleared")
