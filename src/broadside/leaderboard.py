"""Win counter keyed by player id."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Protocol

from broadside.views import LeaderboardEntry

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 10


class Leaderboard(Protocol):
    def record_win(self, player_id: str) -> None:
        ...

    def top_n(self, n: int = DEFAULT_LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
        ...


class InMemoryLeaderboard:
    """Counts wins per player; rankings are capped at ``max_entries``."""

    def __init__(self, max_entries: int = DEFAULT_LEADERBOARD_SIZE) -> None:
        self.max_entries = max_entries
        self._wins: Counter[str] = Counter()
        self._lock = threading.Lock()

    def record_win(self, player_id: str) -> None:
        with self._lock:
            self._wins[player_id] += 1
            wins = self._wins[player_id]
        logger.info("win_recorded", extra={"player": player_id, "wins": wins})

    def top_n(self, n: int = DEFAULT_LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
        """Players ordered by win count, most wins first; ties keep first-win order."""
        limit = max(0, min(n, self.max_entries))
        with self._lock:
            ranked = self._wins.most_common(limit)
        return [LeaderboardEntry(player_id=player_id, wins=wins) for player_id, wins in ranked]

    def wins_for(self, player_id: str) -> int:
        with self._lock:
            return self._wins[player_id]
