"""Fan-out of "match changed" signals to interested observers."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

MatchListener = Callable[[str], None]


class Notifier(Protocol):
    def notify(self, match_id: str) -> None:
        ...


class NullNotifier:
    """Drops every notification."""

    def notify(self, match_id: str) -> None:
        return None


class CallbackNotifier:
    """Calls the listeners subscribed to a match id.

    Delivery is fire-and-forget: a failing listener is logged and the
    remaining listeners still run. Listeners only receive the id and are
    expected to re-fetch the match.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[MatchListener]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, match_id: str, listener: MatchListener) -> None:
        with self._lock:
            self._listeners[match_id].append(listener)

    def unsubscribe(self, match_id: str, listener: MatchListener) -> None:
        with self._lock:
            listeners = self._listeners.get(match_id)
            if not listeners or listener not in listeners:
                return
            listeners.remove(listener)
            if not listeners:
                del self._listeners[match_id]

    def notify(self, match_id: str) -> None:
        with self._lock:
            listeners = list(self._listeners.get(match_id, ()))
        for listener in listeners:
            try:
                listener(match_id)
            except Exception:
                logger.exception("match_listener_failed", extra={"match_id": match_id})
