"""Game-state engine: boards, ships, shots, turns and undo."""

from .board import Board, CellState
from .events import MatchEvent, MatchUpdated, PlayerWon
from .game import AI_PLAYER_ID, Match, MatchStatus, Move, create_match
from .ship import FLEET, Coordinate, Orientation, Ship, ShipClass
from .targeting import Difficulty, choose_target
from .undo import undo_last_move

__all__ = [
    "AI_PLAYER_ID",
    "FLEET",
    "Board",
    "CellState",
    "Coordinate",
    "Difficulty",
    "Match",
    "MatchEvent",
    "MatchStatus",
    "MatchUpdated",
    "Move",
    "Orientation",
    "PlayerWon",
    "Ship",
    "ShipClass",
    "choose_target",
    "create_match",
    "undo_last_move",
]
