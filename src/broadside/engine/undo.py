"""Reverting the most recent move(s) of a match."""

from __future__ import annotations

import logging

from broadside.telemetry import get_tracer

from .game import AI_PLAYER_ID, Match, MatchStatus

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.undo")


def undo_last_move(match: Match) -> Match | None:
    """Pop the last logical turn off the move log and reverse its shots.

    A single-player turn is the human's shot plus the computer's reply, so two
    moves are popped, or one when the human's shot ended the match and drew no
    reply. Otherwise one move is popped. Running out of moves early is accepted.
    The player who made the earliest popped move is to move again, and a
    finished match goes back to in-progress with no winner.
    """
    with tracer.start_as_current_span("match.undo") as span:
        span.set_attribute("match.id", match.match_id)
        if match.status not in (MatchStatus.IN_PROGRESS, MatchStatus.FINISHED):
            logger.warning(
                "undo_rejected_wrong_status",
                extra={"match_id": match.match_id, "status": match.status.value},
            )
            return None
        if not match.moves:
            logger.warning("undo_rejected_no_moves", extra={"match_id": match.match_id})
            return None

        to_undo = 1
        if match.single_player and match.moves[-1].player_id == AI_PLAYER_ID:
            to_undo = 2
        undone = 0
        while undone < to_undo and match.moves:
            move = match.moves.pop()
            undone += 1
            board = match.opponent_board_of(move.player_id)
            if board is not None and move.target in board.shots:
                del board.shots[move.target]
                if move.result.is_hit:
                    ship = board.ship_at(move.target)
                    if ship is not None:
                        ship.hits -= 1
            match.current_turn = move.player_id

        if match.status is MatchStatus.FINISHED:
            match.status = MatchStatus.IN_PROGRESS
            match.winner_id = None

        span.set_attribute("moves.undone", undone)
        logger.info(
            "moves_undone",
            extra={"match_id": match.match_id, "undone": undone, "current_player": match.current_turn},
        )
        return match
