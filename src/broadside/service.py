"""Id-addressed entry points over the match engine."""

from __future__ import annotations

import random
import threading
import time
from typing import Callable, Iterable

from broadside.config import GameSettings, load_game_settings
from broadside.engine.events import MatchEvent, MatchUpdated, PlayerWon
from broadside.engine.game import Match, create_match, generate_match_id
from broadside.engine.ship import Coordinate, Ship
from broadside.engine.targeting import Difficulty
from broadside.engine.undo import undo_last_move
from broadside.leaderboard import InMemoryLeaderboard, Leaderboard
from broadside.notifications import Notifier, NullNotifier
from broadside.store import InMemoryMatchStore, MatchStore
from broadside.telemetry import get_logger, get_tracer, record_game_metric, record_latency
from broadside.views import LeaderboardEntry, MatchView, project_match

MatchOperation = Callable[[Match], "list[MatchEvent] | None"]


class GameService:
    """Runs match operations against an injected store, leaderboard and notifier.

    Every operation returns ``None`` when the match is unknown or the engine
    rejects the action. Mutations of one match are serialised; the events a
    mutation produces are delivered after it has been stored, and delivery
    failures are logged without undoing the mutation.
    """

    def __init__(
        self,
        store: MatchStore | None = None,
        leaderboard: Leaderboard | None = None,
        notifier: Notifier | None = None,
        settings: GameSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or load_game_settings()
        self.store = store if store is not None else InMemoryMatchStore()
        self.leaderboard = (
            leaderboard
            if leaderboard is not None
            else InMemoryLeaderboard(self.settings.leaderboard_size)
        )
        self.notifier = notifier if notifier is not None else NullNotifier()
        self._rng = rng or random.Random(self.settings.rng_seed)
        self._match_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._logger = get_logger("broadside.service")
        self._tracer = get_tracer("broadside.service")

    def create_game(
        self,
        player_id: str,
        single_player: bool = True,
        difficulty: Difficulty | None = None,
    ) -> Match | None:
        difficulty = difficulty or Difficulty(self.settings.default_difficulty)
        with self._tracer.start_as_current_span("broadside.service.create_game") as span:
            span.set_attribute("single_player", single_player)
            span.set_attribute("difficulty", difficulty.value)
            match = create_match(
                player_id,
                single_player=single_player,
                difficulty=difficulty,
                rng=random.Random(self._rng.getrandbits(64)),
                match_id=generate_match_id(self._rng),
                placement_attempts=self.settings.placement_attempts,
                parity_attempts=self.settings.parity_attempts,
            )
            if match is None:
                return None
            for _ in range(self.settings.match_id_retries):
                if self.store.try_add(match.match_id, match):
                    break
                self._logger.warning("match_id_collision match_id=%s", match.match_id)
                match.match_id = generate_match_id(self._rng)
            else:
                self._logger.error("match_id_retries_exhausted player=%s", player_id)
                return None
            span.set_attribute("match.id", match.match_id)
            record_game_metric(
                "broadside_matches_created_total",
                1,
                {"single_player": single_player, "difficulty": difficulty.value},
            )
            self._logger.info(
                "create_game match_id=%s player=%s single_player=%s difficulty=%s",
                match.match_id,
                player_id,
                single_player,
                difficulty.value,
            )
            return match

    def get_match(self, match_id: str) -> Match | None:
        return self.store.get(match_id)

    def get_view(self, match_id: str, player_id: str) -> MatchView | None:
        found = self._lookup(match_id)
        if found is None:
            return None
        match, lock = found
        with lock:
            return project_match(match, player_id)

    def join_game(self, match_id: str, player_id: str) -> Match | None:
        return self._mutate("join_game", match_id, lambda match: match.join(player_id))

    def place_ships(self, match_id: str, player_id: str, ships: Iterable[Ship]) -> Match | None:
        fleet = list(ships)
        return self._mutate(
            "place_ships", match_id, lambda match: match.place_ships(player_id, fleet)
        )

    def shoot(self, match_id: str, player_id: str, target: Coordinate) -> MatchView | None:
        """Fire for ``player_id`` and return their view of the result."""
        if self._mutate("shoot", match_id, lambda m: m.shoot(player_id, target)) is None:
            return None
        return self.get_view(match_id, player_id)

    def undo(self, match_id: str) -> Match | None:
        def _undo(match: Match) -> list[MatchEvent] | None:
            if undo_last_move(match) is None:
                return None
            return [MatchUpdated(match.match_id)]

        return self._mutate("undo", match_id, _undo)

    def restart(self, match_id: str, player_id: str) -> Match | None:
        return self._mutate("restart", match_id, lambda match: match.restart(player_id))

    def leaderboard_top(self, n: int | None = None) -> list[LeaderboardEntry]:
        return self.leaderboard.top_n(n if n is not None else self.settings.leaderboard_size)

    def _lookup(self, match_id: str) -> tuple[Match, threading.Lock] | None:
        """Return a stored match with its mutation lock, or None for unknown ids.

        Locks are only created for ids the store holds and are never evicted,
        so the lock map lives exactly as long as the store does.
        """
        match = self.store.get(match_id)
        if match is None:
            return None
        with self._locks_guard:
            lock = self._match_locks.get(match_id)
            if lock is None:
                lock = threading.Lock()
                self._match_locks[match_id] = lock
        return match, lock

    def _mutate(self, operation: str, match_id: str, apply: MatchOperation) -> Match | None:
        start = time.perf_counter()
        with self._tracer.start_as_current_span(f"broadside.service.{operation}") as span:
            span.set_attribute("match.id", match_id)
            found = self._lookup(match_id)
            if found is None:
                span.set_attribute("result", "not_found")
                self._logger.warning("%s rejected: match %s not found", operation, match_id)
                self._record_outcome(operation, "not_found", start)
                return None

            match, lock = found
            with lock:
                events = apply(match)
                if events is None:
                    span.set_attribute("result", "rejected")
                    self._record_outcome(operation, "rejected", start)
                    return None
                self.store.put(match_id, match)
                span.set_attribute("status", match.status.value)
                span.set_attribute("moves", len(match.moves))

            span.set_attribute("result", "ok")
            self._dispatch(events)
            self._record_outcome(operation, "ok", start)
            return match

    def _dispatch(self, events: list[MatchEvent]) -> None:
        for event in events:
            try:
                if isinstance(event, PlayerWon):
                    self.leaderboard.record_win(event.player_id)
                    record_game_metric("broadside_wins_recorded_total", 1)
                elif isinstance(event, MatchUpdated):
                    self.notifier.notify(event.match_id)
            except Exception:
                self._logger.exception("event_delivery_failed event=%r", event)

    def _record_outcome(self, operation: str, result: str, start: float) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        attrs = {"operation": operation, "result": result}
        record_game_metric("broadside_service_operations_total", 1, attrs)
        record_latency("broadside_service_operation_latency_ms", duration_ms, attrs)
