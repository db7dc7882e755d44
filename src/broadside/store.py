"""Keyed storage for live matches."""

from __future__ import annotations

import threading
from typing import Protocol

from broadside.engine.game import Match


class MatchStore(Protocol):
    """Lookup of matches by id, safe to share across concurrent callers."""

    def get(self, match_id: str) -> Match | None:
        ...

    def put(self, match_id: str, match: Match) -> None:
        ...

    def try_add(self, match_id: str, match: Match) -> bool:
        ...


class InMemoryMatchStore:
    """Process-local store; matches live until the store is dropped."""

    def __init__(self) -> None:
        self._matches: dict[str, Match] = {}
        self._lock = threading.Lock()

    def get(self, match_id: str) -> Match | None:
        with self._lock:
            return self._matches.get(match_id)

    def put(self, match_id: str, match: Match) -> None:
        with self._lock:
            self._matches[match_id] = match

    def try_add(self, match_id: str, match: Match) -> bool:
        """Insert only if ``match_id`` is free; False signals an id collision."""
        with self._lock:
            if match_id in self._matches:
                return False
            self._matches[match_id] = match
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)
