"""Side effects requested by match operations.

The engine never talks to the leaderboard or to observers itself. Mutating
operations return these events and the caller decides how to deliver them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class MatchUpdated:
    """Observers of ``match_id`` should re-fetch its state."""

    match_id: str


@dataclass(frozen=True)
class PlayerWon:
    """``player_id`` won ``match_id`` and should be credited on the leaderboard."""

    match_id: str
    player_id: str


MatchEvent = Union[MatchUpdated, PlayerWon]
