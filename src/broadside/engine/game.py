"""Match lifecycle: creation, joining, placement, turns and win detection."""

from __future__ import annotations

import logging
import random
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from broadside.telemetry import get_meter, get_tracer

from .board import DEFAULT_PLACEMENT_ATTEMPTS, Board, CellState
from .events import MatchEvent, MatchUpdated, PlayerWon
from .ship import Coordinate, Ship
from .targeting import DEFAULT_PARITY_ATTEMPTS, Difficulty, choose_target

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.game")
meter = get_meter("broadside.engine.game")

MOVE_COUNTER = meter.create_counter(
    "broadside_engine_moves",
    unit="1",
    description="Number of moves recorded in matches",
)

AI_PLAYER_ID = "AI"
MATCH_ID_ALPHABET = string.ascii_uppercase + string.digits
MATCH_ID_LENGTH = 6


def generate_match_id(rng: random.Random | None = None) -> str:
    """Return a short, human-shareable id such as ``"K3ZQ9A"``."""
    source = rng or random
    return "".join(source.choice(MATCH_ID_ALPHABET) for _ in range(MATCH_ID_LENGTH))


class MatchStatus(Enum):
    """High-level lifecycle of a match."""

    WAITING_FOR_PLAYER = "waiting_for_player"
    PLACING_SHIPS = "placing_ships"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(frozen=True)
class Move:
    """One resolved shot in the match log."""

    player_id: str
    target: Coordinate
    result: CellState
    sunk_ship_name: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Match:
    """Authoritative state of a single match.

    Operations return ``None`` for rejected actions instead of
    raising; the reason is logged. Successful mutations return the events the
    caller should deliver.
    """

    match_id: str
    player1_id: str
    player1_board: Board
    player2_board: Board
    player2_id: str | None = None
    current_turn: str = ""
    status: MatchStatus = MatchStatus.WAITING_FOR_PLAYER
    winner_id: str | None = None
    single_player: bool = False
    difficulty: Difficulty = Difficulty.MEDIUM
    moves: list[Move] = field(default_factory=list)
    placement_attempts: int = DEFAULT_PLACEMENT_ATTEMPTS
    parity_attempts: int = DEFAULT_PARITY_ATTEMPTS
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @property
    def board_size(self) -> int:
        return self.player1_board.size

    def is_participant(self, player_id: str) -> bool:
        return player_id in (self.player1_id, self.player2_id)

    def board_of(self, player_id: str) -> Board | None:
        """Return the board owned by ``player_id``."""
        if player_id == self.player1_id:
            return self.player1_board
        if self.player2_id is not None and player_id == self.player2_id:
            return self.player2_board
        return None

    def opponent_of(self, player_id: str) -> str | None:
        if player_id == self.player1_id:
            return self.player2_id
        if self.player2_id is not None and player_id == self.player2_id:
            return self.player1_id
        return None

    def opponent_board_of(self, player_id: str) -> Board | None:
        """Return the board ``player_id`` fires at."""
        if player_id == self.player1_id:
            return self.player2_board
        if self.player2_id is not None and player_id == self.player2_id:
            return self.player1_board
        return None

    def join(self, player_id: str) -> list[MatchEvent] | None:
        """Take the empty player-2 seat of a multiplayer match."""
        with tracer.start_as_current_span("match.join") as span:
            span.set_attribute("match.id", self.match_id)
            if (
                self.single_player
                or self.player2_id is not None
                or player_id in (self.player1_id, AI_PLAYER_ID)
            ):
                logger.warning(
                    "join_rejected",
                    extra={"match_id": self.match_id, "player": player_id},
                )
                return None
            self.player2_id = player_id
            self.status = MatchStatus.PLACING_SHIPS
            logger.info("match_joined", extra={"match_id": self.match_id, "player": player_id})
            return [MatchUpdated(self.match_id)]

    def place_ships(self, player_id: str, ships: Iterable[Ship]) -> list[MatchEvent] | None:
        """Replace ``player_id``'s fleet with ``ships`` on a best-effort basis.

        Ships that fall off the board or overlap an already accepted ship are
        dropped. The match starts once both boards hold at least one ship.
        """
        with tracer.start_as_current_span("match.place_ships") as span:
            span.set_attribute("match.id", self.match_id)
            span.set_attribute("player", player_id)
            if self.status not in (MatchStatus.WAITING_FOR_PLAYER, MatchStatus.PLACING_SHIPS):
                logger.warning(
                    "placement_rejected_wrong_status",
                    extra={"match_id": self.match_id, "player": player_id, "status": self.status.value},
                )
                return None
            board = self.board_of(player_id) if player_id != AI_PLAYER_ID else None
            if board is None:
                logger.warning(
                    "placement_rejected_unknown_player",
                    extra={"match_id": self.match_id, "player": player_id},
                )
                return None

            board.ships.clear()
            submitted = 0
            for ship in ships:
                submitted += 1
                board.place_ship(ship)
            span.set_attribute("ships.submitted", submitted)
            span.set_attribute("ships.placed", len(board.ships))
            if len(board.ships) < submitted:
                logger.warning(
                    "placement_partial",
                    extra={
                        "match_id": self.match_id,
                        "player": player_id,
                        "submitted": submitted,
                        "placed": len(board.ships),
                    },
                )

            if self.player1_board.ships and self.player2_board.ships:
                self.status = MatchStatus.IN_PROGRESS
                logger.info(
                    "match_started",
                    extra={"match_id": self.match_id, "current_player": self.current_turn},
                )
            return [MatchUpdated(self.match_id)]

    def shoot(self, player_id: str, coord: Coordinate) -> list[MatchEvent] | None:
        """Fire at the opponent; in single-player the computer answers in the same call."""
        with tracer.start_as_current_span("match.shoot") as span:
            span.set_attribute("match.id", self.match_id)
            span.set_attribute("player", player_id)
            span.set_attribute("row", coord.row)
            span.set_attribute("col", coord.col)
            if self.status is not MatchStatus.IN_PROGRESS:
                logger.warning(
                    "move_rejected_match_not_in_progress",
                    extra={"match_id": self.match_id, "player": player_id, "status": self.status.value},
                )
                return None
            if player_id != self.current_turn:
                logger.warning(
                    "move_rejected_wrong_player",
                    extra={"match_id": self.match_id, "player": player_id, "current": self.current_turn},
                )
                return None
            opponent = self.opponent_of(player_id)
            target_board = self.opponent_board_of(player_id)
            if opponent is None or target_board is None:
                logger.warning(
                    "move_rejected_no_opponent",
                    extra={"match_id": self.match_id, "player": player_id},
                )
                return None
            if not target_board.is_valid_coordinate(coord):
                logger.warning(
                    "move_rejected_out_of_bounds",
                    extra={"match_id": self.match_id, "player": player_id, "row": coord.row, "col": coord.col},
                )
                return None
            if coord in target_board.shots:
                logger.warning(
                    "move_rejected_duplicate",
                    extra={"match_id": self.match_id, "player": player_id, "row": coord.row, "col": coord.col},
                )
                return None

            events: list[MatchEvent] = []
            if self._fire(player_id, target_board, coord, opponent):
                if player_id != AI_PLAYER_ID:
                    events.append(PlayerWon(self.match_id, player_id))
            elif self.single_player and self.current_turn == AI_PLAYER_ID:
                self._ai_turn()
            span.set_attribute("next_player", self.current_turn)
            events.append(MatchUpdated(self.match_id))
            return events

    def restart(self, player_id: str) -> list[MatchEvent] | None:
        """Reset to ship placement with fresh boards of the same size."""
        with tracer.start_as_current_span("match.restart") as span:
            span.set_attribute("match.id", self.match_id)
            if player_id == AI_PLAYER_ID or not self.is_participant(player_id):
                logger.warning(
                    "restart_rejected",
                    extra={"match_id": self.match_id, "player": player_id},
                )
                return None
            size = self.board_size
            self.status = MatchStatus.PLACING_SHIPS
            self.winner_id = None
            self.current_turn = self.player1_id
            self.player1_board = Board(size=size, owner=self.player1_board.owner)
            self.player2_board = Board(size=size, owner=self.player2_board.owner)
            self.moves.clear()
            if self.single_player:
                self.player2_board.random_placement(self.rng, self.placement_attempts)
            logger.info("match_restarted", extra={"match_id": self.match_id, "player": player_id})
            return [MatchUpdated(self.match_id)]

    def _fire(self, player_id: str, target_board: Board, coord: Coordinate, opponent: str) -> bool:
        """Resolve one shot, log the move and either finish the match or pass the turn."""
        state, ship = target_board.receive_shot(coord)
        sunk_ship_name = ship.name if state is CellState.SUNK and ship is not None else None
        self.moves.append(Move(player_id, coord, state, sunk_ship_name))
        MOVE_COUNTER.add(1, attributes={"result": state.value, "ai": player_id == AI_PLAYER_ID})

        if target_board.all_ships_sunk():
            self.status = MatchStatus.FINISHED
            self.winner_id = player_id
            logger.info(
                "match_finished",
                extra={"match_id": self.match_id, "winner": player_id, "moves": len(self.moves)},
            )
            return True
        self.current_turn = opponent
        return False

    def _ai_turn(self) -> None:
        target = choose_target(self.player1_board, self.difficulty, self.rng, self.parity_attempts)
        self._fire(AI_PLAYER_ID, self.player1_board, target, self.player1_id)


def create_match(
    player_id: str,
    single_player: bool = True,
    difficulty: Difficulty = Difficulty.MEDIUM,
    rng: random.Random | None = None,
    match_id: str | None = None,
    placement_attempts: int = DEFAULT_PLACEMENT_ATTEMPTS,
    parity_attempts: int = DEFAULT_PARITY_ATTEMPTS,
) -> Match | None:
    """Create a match owned by ``player_id``, who always takes the first turn.

    Single-player matches seat the computer as player 2, place its fleet at
    random and go straight to ship placement. Returns None if ``player_id``
    is empty or is the reserved computer id.
    """
    with tracer.start_as_current_span("match.create") as span:
        if not player_id or player_id == AI_PLAYER_ID:
            logger.warning("create_rejected_reserved_player", extra={"player": player_id})
            return None
        rng = rng or random.Random()
        size = difficulty.board_size
        match = Match(
            match_id=match_id or generate_match_id(rng),
            player1_id=player_id,
            player1_board=Board(size=size, owner="player1"),
            player2_board=Board(size=size, owner="player2"),
            current_turn=player_id,
            single_player=single_player,
            difficulty=difficulty,
            placement_attempts=placement_attempts,
            parity_attempts=parity_attempts,
            rng=rng,
        )
        if single_player:
            match.player2_id = AI_PLAYER_ID
            match.status = MatchStatus.PLACING_SHIPS
            match.player2_board.random_placement(rng, placement_attempts)
        span.set_attribute("match.id", match.match_id)
        span.set_attribute("board.size", size)
        span.set_attribute("single_player", single_player)
        logger.info(
            "match_created",
            extra={
                "match_id": match.match_id,
                "player": player_id,
                "single_player": single_player,
                "difficulty": difficulty.value,
            },
        )
        return match
