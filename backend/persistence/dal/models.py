"""Entity models exchanged with the data access layer."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TeamColor(StrEnum):
    WHITE = "WHITE"
    BLACK = "BLACK"


class User(BaseModel, frozen=True):
    """Registered account. The password arrives already hashed."""

    username: str
    password: str
    email: str
    profile: dict[str, Any] | None = None  # opaque, stored in the `json` column


class AuthData(BaseModel, frozen=True):
    """An issued auth token and the user it authorizes."""

    auth_token: str
    username: str
    metadata: dict[str, Any] | None = None


class GameState(BaseModel):
    """Serialized rules-engine snapshot stored with each game.

    Only the seat assignments are interpreted here. Everything else the
    engine puts in the snapshot is carried through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    white_username: str | None = None
    black_username: str | None = None
    team_turn: TeamColor | str = TeamColor.WHITE  # engines may use their own spelling
    board: dict[str, Any] | None = None

    def player(self, color: TeamColor) -> str | None:
        return self.white_username if color == TeamColor.WHITE else self.black_username

    def with_player(self, color: TeamColor, username: str | None) -> "GameState":
        field = "white_username" if color == TeamColor.WHITE else "black_username"
        return self.model_copy(update={field: username})


class Game(BaseModel, frozen=True):
    """A game record.

    Seat assignments live only inside ``state``; the white/black properties
    read them from there so there is a single source for both the snapshot
    and the queryable player columns.
    """

    game_id: int
    game_name: str
    state: GameState = Field(default_factory=GameState)
    metadata: dict[str, Any] | None = None

    @property
    def white_username(self) -> str | None:
        return self.state.white_username

    @property
    def black_username(self) -> str | None:
        return self.state.black_username

    def with_player(self, color: TeamColor, username: str | None) -> "Game":
        return self.model_copy(update={"state": self.state.with_player(color, username)})
