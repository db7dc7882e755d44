"""Per-player projections of a match and leaderboard rows."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from broadside.engine.board import Board, CellState
from broadside.engine.game import Match, MatchStatus, Move
from broadside.engine.ship import Orientation, Ship
from broadside.engine.targeting import Difficulty


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    wins: int = Field(ge=0)


class ShotView(BaseModel):
    """Recorded outcome of one cell."""

    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    state: CellState


class MoveView(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    row: int
    col: int
    result: CellState
    sunk_ship_name: str | None = None
    timestamp: datetime


class ShipView(BaseModel):
    """One of the requesting player's own ships."""

    model_config = ConfigDict(frozen=True)

    name: str
    size: int
    row: int
    col: int
    orientation: Orientation
    hits: int
    sunk: bool


class MatchView(BaseModel):
    """What one participant is allowed to see of a match.

    ``my_shots`` are the outcomes of this player's shots (recorded on the
    opponent board) and ``opponent_shots`` the outcomes of shots received.
    Opponent ship positions never appear; a sunk ship is only visible through
    the SUNK cell and the move history.
    """

    model_config = ConfigDict(frozen=True)

    match_id: str
    player_id: str
    opponent_id: str | None
    current_turn: str
    status: MatchStatus
    winner_id: str | None
    single_player: bool
    difficulty: Difficulty
    board_size: int
    my_fleet: list[ShipView]
    my_shots: list[ShotView]
    opponent_shots: list[ShotView]
    history: list[MoveView]


def _shot_views(board: Board) -> list[ShotView]:
    return [
        ShotView(row=coord.row, col=coord.col, state=state)
        for coord, state in sorted(board.shots.items(), key=lambda item: (item[0].row, item[0].col))
    ]


def _ship_view(ship: Ship) -> ShipView:
    return ShipView(
        name=ship.name,
        size=ship.size,
        row=ship.start.row,
        col=ship.start.col,
        orientation=ship.orientation,
        hits=ship.hits,
        sunk=ship.is_sunk(),
    )


def _move_view(move: Move) -> MoveView:
    return MoveView(
        player_id=move.player_id,
        row=move.target.row,
        col=move.target.col,
        result=move.result,
        sunk_ship_name=move.sunk_ship_name,
        timestamp=move.timestamp,
    )


def project_match(match: Match, player_id: str) -> MatchView | None:
    """Build ``player_id``'s view of ``match``; None for non-participants."""
    own_board = match.board_of(player_id)
    target_board = match.opponent_board_of(player_id)
    if own_board is None or target_board is None:
        return None
    return MatchView(
        match_id=match.match_id,
        player_id=player_id,
        opponent_id=match.opponent_of(player_id),
        current_turn=match.current_turn,
        status=match.status,
        winner_id=match.winner_id,
        single_player=match.single_player,
        difficulty=match.difficulty,
        board_size=match.board_size,
        my_fleet=[_ship_view(ship) for ship in own_board.ships],
        my_shots=_shot_views(target_board),
        opponent_shots=_shot_views(own_board),
        history=[_move_view(move) for move in match.moves],
    )
