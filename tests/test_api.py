"""Request validation and error mapping in the API facade."""

from __future__ import annotations

import pytest

from broadside.api import GameApi
from broadside.config import GameSettings
from broadside.engine.game import AI_PLAYER_ID, MatchStatus
from broadside.engine.ship import Coordinate, Orientation, Ship
from broadside.engine.targeting import Difficulty
from broadside.errors import ErrorKind, InvalidAction, MatchNotFound, ValidationFailed
from broadside.service import GameService

FLEET_PAYLOAD = [
    {"name": "Carrier", "size": 5, "row": 0, "col": 0, "orientation": "horizontal"},
    {"name": "Battleship", "size": 4, "row": 1, "col": 0, "orientation": "Horizontal"},
    {"name": "Cruiser", "size": 3, "row": 2, "col": 0, "orientation": "H"},
    {"name": "Submarine", "size": 3, "row": 3, "col": 0, "orientation": "h"},
    {"name": "Destroyer", "size": 2, "row": 5, "col": 5, "orientation": "v"},
]


@pytest.fixture
def api() -> GameApi:
    return GameApi(GameService(settings=GameSettings(rng_seed=12)))


def _two_player_game(api: GameApi) -> str:
    view = api.create_game({"player_id": "P1", "single_player": False})
    game_id = view.match_id
    api.join_game(game_id, {"game_id": game_id, "player_id": "P2"})
    for player in ("P1", "P2"):
        api.place_ships(game_id, {"game_id": game_id, "player_id": player, "ships": FLEET_PAYLOAD})
    return game_id


def test_create_game_returns_creator_view(api: GameApi) -> None:
    view = api.create_game({"player_id": "P1", "difficulty": "EASY"})
    assert view.player_id == "P1"
    assert view.opponent_id == AI_PLAYER_ID
    assert view.difficulty is Difficulty.EASY
    assert view.board_size == 8
    assert view.status is MatchStatus.PLACING_SHIPS
    assert view.my_fleet == []


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"player_id": ""},
        {"player_id": "P1", "difficulty": "impossible"},
        {"player_id": "P1", "unexpected": True},
    ],
)
def test_create_game_validation(api: GameApi, payload: dict) -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        api.create_game(payload)
    assert excinfo.value.kind is ErrorKind.VALIDATION_FAILED
    assert excinfo.value.details


def test_create_game_with_reserved_id_is_invalid(api: GameApi) -> None:
    with pytest.raises(InvalidAction):
        api.create_game({"player_id": AI_PLAYER_ID})


def test_place_ships_accepts_orientation_aliases(api: GameApi) -> None:
    game_id = _two_player_game(api)
    view = api.get_game(game_id, "P1")
    assert view.status is MatchStatus.IN_PROGRESS
    assert [ship.orientation for ship in view.my_fleet] == [Orientation.HORIZONTAL] * 4 + [
        Orientation.VERTICAL
    ]


@pytest.mark.parametrize(
    "ship",
    [
        {"name": "Dinghy", "size": 1, "row": 0, "col": 0, "orientation": "h"},
        {"name": "Carrier", "size": 5, "row": -1, "col": 0, "orientation": "h"},
        {"name": "", "size": 3, "row": 0, "col": 0, "orientation": "h"},
        {"name": "Cruiser", "size": 3, "row": 0, "col": 0, "orientation": "diagonal"},
    ],
)
def test_place_ships_validation(api: GameApi, ship: dict) -> None:
    game_id = api.create_game({"player_id": "P1"}).match_id
    with pytest.raises(ValidationFailed):
        api.place_ships(game_id, {"game_id": game_id, "player_id": "P1", "ships": [ship]})


def test_shoot_negative_coordinates_fail_validation(api: GameApi) -> None:
    game_id = _two_player_game(api)
    with pytest.raises(ValidationFailed):
        api.shoot(game_id, {"game_id": game_id, "player_id": "P1", "row": -1, "col": 0})


def test_shoot_path_mismatch_is_invalid(api: GameApi) -> None:
    game_id = _two_player_game(api)
    with pytest.raises(InvalidAction, match="mismatch"):
        api.shoot(game_id, {"game_id": "OTHER1", "player_id": "P1", "row": 0, "col": 0})


def test_unknown_game_is_not_found(api: GameApi) -> None:
    with pytest.raises(MatchNotFound) as excinfo:
        api.shoot("ZZZZZZ", {"game_id": "ZZZZZZ", "player_id": "P1", "row": 0, "col": 0})
    assert excinfo.value.kind is ErrorKind.NOT_FOUND
    with pytest.raises(MatchNotFound):
        api.get_game("ZZZZZZ", "P1")
    with pytest.raises(MatchNotFound):
        api.undo("ZZZZZZ", "P1")


def test_rejected_moves_are_invalid_actions(api: GameApi) -> None:
    game_id = _two_player_game(api)
    with pytest.raises(InvalidAction):
        api.shoot(game_id, {"game_id": game_id, "player_id": "P2", "row": 0, "col": 0})
    with pytest.raises(InvalidAction):
        api.shoot(game_id, {"game_id": game_id, "player_id": "P1", "row": 10, "col": 0})
    with pytest.raises(InvalidAction):
        api.undo(game_id, "P1")
    with pytest.raises(InvalidAction):
        api.join_game(game_id, {"game_id": game_id, "player_id": "P3"})
    with pytest.raises(InvalidAction):
        api.restart(game_id, {"player_id": "P3"})
    with pytest.raises(InvalidAction):
        api.get_game(game_id, "P3")


def test_full_two_player_exchange(api: GameApi) -> None:
    game_id = _two_player_game(api)
    view = api.shoot(game_id, {"game_id": game_id, "player_id": "P1", "row": 0, "col": 0})
    assert view.current_turn == "P2"
    assert [(shot.row, shot.col) for shot in view.my_shots] == [(0, 0)]

    view = api.undo(game_id, "P1")
    assert view.history == []
    assert view.current_turn == "P1"

    view = api.restart(game_id, {"player_id": "P2"})
    assert view.status is MatchStatus.PLACING_SHIPS
    assert api.leaderboard() == []


def test_win_through_api_lands_on_leaderboard(api: GameApi) -> None:
    game_id = api.create_game({"player_id": "P1"}).match_id
    match = api.service.get_match(game_id)
    assert match is not None
    match.player2_board.ships = [Ship("Destroyer", 2, Coordinate(7, 7), Orientation.VERTICAL)]
    api.place_ships(game_id, {"game_id": game_id, "player_id": "P1", "ships": FLEET_PAYLOAD})

    api.shoot(game_id, {"game_id": game_id, "player_id": "P1", "row": 7, "col": 7})
    view = api.shoot(game_id, {"game_id": game_id, "player_id": "P1", "row": 8, "col": 7})
    assert view.winner_id == "P1"
    assert [(entry.player_id, entry.wins) for entry in api.leaderboard()] == [("P1", 1)]


@pytest.mark.parametrize("caller", ["stranger", AI_PLAYER_ID])
def test_undo_by_outsider_leaves_match_untouched(api: GameApi, caller: str) -> None:
    game_id = api.create_game({"player_id": "P1"}).match_id
    api.place_ships(game_id, {"game_id": game_id, "player_id": "P1", "ships": FLEET_PAYLOAD})
    api.shoot(game_id, {"game_id": game_id, "player_id": "P1", "row": 9, "col": 9})
    match = api.service.get_match(game_id)
    assert match is not None
    shots_before = dict(match.player2_board.shots)

    with pytest.raises(InvalidAction):
        api.undo(game_id, caller)

    assert len(match.moves) == 2
    assert match.player2_board.shots == shots_before
    assert match.current_turn == "P1"
