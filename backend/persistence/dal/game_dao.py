"""Abstract interface for game persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from persistence.dal.models import Game, GameState, TeamColor


class GameDAO(ABC):
    """Abstract interface for game persistence."""

    @abstractmethod
    def create_game(
        self,
        game_name: str,
        state: GameState | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Game: ...

    @abstractmethod
    def get_game(self, game_id: int) -> Game | None: ...

    @abstractmethod
    def list_games(self) -> list[Game]: ...

    @abstractmethod
    def list_player_games(self, username: str) -> list[Game]: ...

    @abstractmethod
    def update_game(self, game: Game) -> bool: ...

    @abstractmethod
    def set_player(self, game_id: int, color: TeamColor, username: str | None) -> bool: ...

    @abstractmethod
    def delete_game(self, game_id: int) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...
