"""Computer opponent shot selection."""

from __future__ import annotations

import logging
import random
from enum import Enum

from broadside.telemetry import get_tracer

from .board import Board, CellState
from .ship import Coordinate

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.targeting")

RANDOM_SAMPLE_ATTEMPTS = 100
DEFAULT_PARITY_ATTEMPTS = 100


class Difficulty(Enum):
    """Skill tier of the computer opponent; also decides the board size."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def board_size(self) -> int:
        return _BOARD_SIZES.get(self, 10)


_BOARD_SIZES = {
    Difficulty.EASY: 8,
    Difficulty.MEDIUM: 10,
    Difficulty.HARD: 12,
}


def hunt_candidates(board: Board) -> list[Coordinate]:
    """Unshot in-bounds neighbours of every cell recorded as HIT.

    Recomputed from the full shot history on each call. Duplicates are kept,
    so a cell bordering two hits is proportionally more likely to be picked.
    """
    candidates: list[Coordinate] = []
    for coord, state in board.shots.items():
        if state is not CellState.HIT:
            continue
        for neighbour in coord.neighbours():
            if board.is_valid_coordinate(neighbour) and neighbour not in board.shots:
                candidates.append(neighbour)
    return candidates


def random_unshot(board: Board, rng: random.Random) -> Coordinate:
    """Pick a uniformly random cell that has not been fired upon.

    Rejection sampling is tried first; if it keeps landing on spent cells the
    choice is made from the full list of unshot cells instead.
    """
    for _ in range(RANDOM_SAMPLE_ATTEMPTS):
        coord = Coordinate(rng.randrange(board.size), rng.randrange(board.size))
        if coord not in board.shots:
            return coord
    remaining = board.unshot_coordinates()
    if not remaining:
        raise ValueError("Every cell on the board has already been targeted.")
    return rng.choice(remaining)


def parity_unshot(
    board: Board, rng: random.Random, attempts: int = DEFAULT_PARITY_ATTEMPTS
) -> Coordinate:
    """Prefer unshot cells with even ``row + col``; fall back to any unshot cell."""
    for _ in range(attempts):
        coord = Coordinate(rng.randrange(board.size), rng.randrange(board.size))
        if (coord.row + coord.col) % 2 == 0 and coord not in board.shots:
            return coord
    logger.debug("parity_search_exhausted", extra={"attempts": attempts, "owner": board.owner})
    return random_unshot(board, rng)


def choose_target(
    board: Board,
    difficulty: Difficulty,
    rng: random.Random,
    parity_attempts: int = DEFAULT_PARITY_ATTEMPTS,
) -> Coordinate:
    """Choose the computer's next shot against ``board``.

    The result is always on the board and never a cell already fired upon.
    """
    with tracer.start_as_current_span("targeting.choose_target") as span:
        span.set_attribute("difficulty", difficulty.value)
        if difficulty is Difficulty.EASY:
            mode = "random"
            target = random_unshot(board, rng)
        else:
            candidates = hunt_candidates(board)
            if candidates:
                mode = "target"
                target = rng.choice(candidates)
            elif difficulty is Difficulty.HARD:
                mode = "parity"
                target = parity_unshot(board, rng, parity_attempts)
            else:
                mode = "random"
                target = random_unshot(board, rng)
        span.set_attribute("mode", mode)
        span.set_attribute("row", target.row)
        span.set_attribute("col", target.col)
        logger.debug(
            "ai_target_chosen",
            extra={"difficulty": difficulty.value, "mode": mode, "row": target.row, "col": target.col},
        )
        return target
