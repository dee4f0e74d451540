"""SQL-backed game DAO."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from persistence.dal.game_dao import GameDAO
from persistence.dal.models import Game, GameState, TeamColor
from persistence.db.json_columns import decode_json, encode_json
from persistence.errors import ConstraintViolationError, CorruptRowError

if TYPE_CHECKING:
    from persistence.db.executor import SqlParam, StatementExecutor

logger = structlog.get_logger()

MAX_CREATE_ATTEMPTS = 3

_SELECT_COLUMNS = (
    "SELECT `gameID`, `whiteUsername`, `blackUsername`, `gameName`, `jsonChessGame`, `json` FROM `game`"
)

# Seat -> (denormalized column, JSON path inside the snapshot)
_SEATS: dict[TeamColor, tuple[str, str]] = {
    TeamColor.WHITE: ("whiteUsername", "$.white_username"),
    TeamColor.BLACK: ("blackUsername", "$.black_username"),
}


def _row_values(game: Game) -> tuple[SqlParam, ...]:
    """Derive the player columns and the snapshot from the same GameState.

    Returns (whiteUsername, blackUsername, gameName, jsonChessGame, json).
    """
    state = game.state
    return (
        state.white_username,
        state.black_username,
        game.game_name,
        state.model_dump_json(),
        encode_json(game.metadata),
    )


def _game_from_row(row: tuple[Any, ...]) -> Game:
    game_id, white, black, name, snapshot, metadata = row
    try:
        if snapshot is None:
            state = GameState(white_username=white, black_username=black)
        else:
            state = GameState.model_validate_json(snapshot)
        decoded_metadata = decode_json(metadata)
    except ValueError as exc:
        logger.warning("undecodable game row", game_id=game_id, error=str(exc))
        raise CorruptRowError(f"Stored game {game_id} could not be decoded", key=game_id) from exc
    if (state.player(TeamColor.WHITE), state.player(TeamColor.BLACK)) != (white, black):
        # Only possible for rows written outside this DAO; the columns win.
        logger.warning("game snapshot players disagree with columns", game_id=game_id)
        state = state.with_player(TeamColor.WHITE, white).with_player(TeamColor.BLACK, black)
    return Game(game_id=int(game_id), game_name=name, state=state, metadata=decoded_metadata)


class SqlGameDAO(GameDAO):
    """Game DAO over the `game` table.

    The full engine snapshot is stored as JSON in `jsonChessGame`, with the
    seat assignments copied into `whiteUsername`/`blackUsername` so they can
    be queried. Every write sets both in a single statement.
    """

    def __init__(self, executor: StatementExecutor) -> None:
        self._executor = executor

    def create_game(
        self,
        game_name: str,
        state: GameState | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Game:
        """Insert a game under the next free id, retrying if another writer took it first."""
        attempt = 0
        while True:
            attempt += 1
            game = Game(
                game_id=self._next_game_id(),
                game_name=game_name,
                state=state if state is not None else GameState(),
                metadata=metadata,
            )
            try:
                self._executor.execute(
                    "INSERT INTO `game` "
                    "(`gameID`, `whiteUsername`, `blackUsername`, `gameName`, `jsonChessGame`, `json`) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (game.game_id, *_row_values(game)),
                )
            except ConstraintViolationError:
                if attempt >= MAX_CREATE_ATTEMPTS:
                    raise
                logger.warning("game id collision, retrying", game_id=game.game_id, attempt=attempt)
            else:
                logger.info("game created", game_id=game.game_id, game_name=game_name)
                return game

    def get_game(self, game_id: int) -> Game | None:
        row = self._executor.fetch_one(f"{_SELECT_COLUMNS} WHERE `gameID` = ?", (game_id,))
        if row is None:
            return None
        return _game_from_row(row)

    def list_games(self) -> list[Game]:
        rows = self._executor.fetch_all(f"{_SELECT_COLUMNS} ORDER BY `gameID`")
        return [_game_from_row(row) for row in rows]

    def list_player_games(self, username: str) -> list[Game]:
        """Games where username holds either seat, found through the player columns."""
        rows = self._executor.fetch_all(
            f"{_SELECT_COLUMNS} WHERE `whiteUsername` = ? OR `blackUsername` = ? ORDER BY `gameID`",
            (username, username),
        )
        return [_game_from_row(row) for row in rows]

    def update_game(self, game: Game) -> bool:
        """Overwrite a game. Returns False when no game has that id."""
        rowcount = self._executor.execute(
            "UPDATE `game` SET `whiteUsername` = ?, `blackUsername` = ?, `gameName` = ?, "
            "`jsonChessGame` = ?, `json` = ? WHERE `gameID` = ?",
            (*_row_values(game), game.game_id),
        )
        if rowcount == 0:
            logger.warning("update_game had no effect (not found)", game_id=game.game_id)
        return rowcount > 0

    def set_player(self, game_id: int, color: TeamColor, username: str | None) -> bool:
        """Assign (or vacate, with None) one seat without rewriting the rest of the snapshot.

        The column and the snapshot field change in the same UPDATE.
        """
        column, path = _SEATS[color]
        rowcount = self._executor.execute(
            f"UPDATE `game` SET `{column}` = ?, "
            f"`jsonChessGame` = json_set(COALESCE(`jsonChessGame`, '{{}}'), '{path}', ?) "
            "WHERE `gameID` = ?",
            (username, username, game_id),
        )
        if rowcount == 0:
            logger.warning("set_player had no effect (not found)", game_id=game_id, color=color.value)
            return False
        logger.info("player seated", game_id=game_id, color=color.value, username=username)
        return True

    def delete_game(self, game_id: int) -> None:
        self._executor.execute("DELETE FROM `game` WHERE `gameID` = ?", (game_id,))

    def clear(self) -> None:
        self._executor.execute("DELETE FROM `game`")
        logger.info("game table cleared")

    def _next_game_id(self) -> int:
        row = self._executor.fetch_one("SELECT COALESCE(MAX(`gameID`), 0) + 1 FROM `game`")
        return int(row[0]) if row is not None else 1
