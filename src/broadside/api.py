"""Transport-agnostic request handling on top of ``GameService``.

Each handler takes a raw payload (as decoded from JSON by whatever transport
sits in front), validates it, runs the service call and returns a view
model. Failures surface as ``BroadsideError`` subclasses carrying an
``ErrorKind`` the transport can map to its own status codes.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from broadside.engine.game import AI_PLAYER_ID, Match
from broadside.errors import InvalidAction, MatchNotFound, ValidationFailed
from broadside.schemas import (
    CreateGameRequest,
    JoinGameRequest,
    PlaceShipsRequest,
    RestartGameRequest,
    ShootRequest,
)
from broadside.service import GameService
from broadside.views import LeaderboardEntry, MatchView

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


def _parse(model: type[RequestT], payload: Mapping[str, Any]) -> RequestT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        logger.info("request_validation_failed", extra={"request": model.__name__})
        raise ValidationFailed(f"Invalid {model.__name__}", details=exc.errors()) from exc


class GameApi:
    def __init__(self, service: GameService) -> None:
        self.service = service

    def create_game(self, payload: Mapping[str, Any]) -> MatchView:
        request = _parse(CreateGameRequest, payload)
        match = self.service.create_game(
            request.player_id,
            single_player=request.single_player,
            difficulty=request.difficulty,
        )
        if match is None:
            raise InvalidAction("Unable to create game")
        return self._view(match.match_id, request.player_id)

    def get_game(self, game_id: str, player_id: str) -> MatchView:
        return self._view(game_id, player_id)

    def join_game(self, game_id: str, payload: Mapping[str, Any]) -> MatchView:
        request = _parse(JoinGameRequest, payload)
        self._check_path(game_id, request.game_id)
        self._require(game_id)
        if self.service.join_game(game_id, request.player_id) is None:
            raise InvalidAction("Unable to join game")
        return self._view(game_id, request.player_id)

    def place_ships(self, game_id: str, payload: Mapping[str, Any]) -> MatchView:
        request = _parse(PlaceShipsRequest, payload)
        self._check_path(game_id, request.game_id)
        self._require(game_id)
        ships = [placement.to_ship() for placement in request.ships]
        if self.service.place_ships(game_id, request.player_id, ships) is None:
            raise InvalidAction("Unable to place ships")
        return self._view(game_id, request.player_id)

    def shoot(self, game_id: str, payload: Mapping[str, Any]) -> MatchView:
        request = _parse(ShootRequest, payload)
        self._check_path(game_id, request.game_id)
        self._require(game_id)
        view = self.service.shoot(game_id, request.player_id, request.target)
        if view is None:
            raise InvalidAction("Invalid move")
        return view

    def undo(self, game_id: str, player_id: str) -> MatchView:
        match = self._require(game_id)
        if player_id == AI_PLAYER_ID or not match.is_participant(player_id):
            raise InvalidAction("Player is not part of this game")
        if self.service.undo(game_id) is None:
            raise InvalidAction("Unable to undo")
        return self._view(game_id, player_id)

    def restart(self, game_id: str, payload: Mapping[str, Any]) -> MatchView:
        request = _parse(RestartGameRequest, payload)
        self._require(game_id)
        if self.service.restart(game_id, request.player_id) is None:
            raise InvalidAction("Unable to restart game")
        return self._view(game_id, request.player_id)

    def leaderboard(self) -> list[LeaderboardEntry]:
        return self.service.leaderboard_top()

    @staticmethod
    def _check_path(path_id: str, body_id: str) -> None:
        if path_id != body_id:
            raise InvalidAction("Game ID mismatch")

    def _require(self, game_id: str) -> Match:
        match = self.service.get_match(game_id)
        if match is None:
            raise MatchNotFound(f"Game {game_id} not found")
        return match

    def _view(self, game_id: str, player_id: str) -> MatchView:
        self._require(game_id)
        view = self.service.get_view(game_id, player_id)
        if view is None:
            raise InvalidAction("Player is not part of this game")
        return view
