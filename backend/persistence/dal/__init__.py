"""Data access layer: DAO interfaces and entity models."""

from persistence.dal.auth_dao import AuthDAO
from persistence.dal.game_dao import GameDAO
from persistence.dal.models import AuthData, Game, GameState, TeamColor, User
from persistence.dal.user_dao import UserDAO

__all__ = [
    "AuthDAO",
    "AuthData",
    "Game",
    "GameDAO",
    "GameState",
    "TeamColor",
    "User",
    "UserDAO",
]
