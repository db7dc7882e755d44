"""Tests for the Board mechanics."""

import random

from broadside.engine.board import Board, CellState
from broadside.engine.ship import FLEET, Coordinate, Orientation, Ship


def test_board_shot_tracking() -> None:
    board = Board()
    ship = Ship("Destroyer", 2, Coordinate(0, 0), Orientation.HORIZONTAL)
    board.place_ship(ship)

    hit_state, hit_ship = board.receive_shot(Coordinate(0, 0))
    assert hit_state is CellState.HIT
    assert hit_ship is ship
    assert not board.all_ships_sunk()

    miss_state, miss_ship = board.receive_shot(Coordinate(5, 5))
    assert miss_state is CellState.MISS
    assert miss_ship is None

    sunk_state, sunk_ship = board.receive_shot(Coordinate(0, 1))
    assert sunk_state is CellState.SUNK
    assert sunk_ship is ship
    assert board.all_ships_sunk()
    assert board.shots == {
        Coordinate(0, 0): CellState.HIT,
        Coordinate(5, 5): CellState.MISS,
        Coordinate(0, 1): CellState.SUNK,
    }


def test_repeated_shot_returns_cached_outcome_without_extra_hit() -> None:
    board = Board()
    ship = Ship("Cruiser", 3, Coordinate(1, 1), Orientation.VERTICAL)
    board.place_ship(ship)

    first, _ = board.receive_shot(Coordinate(1, 1))
    second, again = board.receive_shot(Coordinate(1, 1))
    assert first is second is CellState.HIT
    assert again is ship
    assert ship.hits == 1

    board.receive_shot(Coordinate(9, 9))
    assert board.receive_shot(Coordinate(9, 9)) == (CellState.MISS, None)
    assert len(board.shots) == 2


def test_sunk_iff_hits_reach_size_through_a_full_game() -> None:
    board = Board()
    board.random_placement(random.Random(11))
    for coord in board.unshot_coordinates():
        board.receive_shot(coord)
        for ship in board.ships:
            assert ship.is_sunk() == (ship.hits >= ship.size)
    assert board.all_ships_sunk()
    assert all(ship.hits == ship.size for ship in board.ships)


def test_ship_placement_rejects_overlap_and_bounds() -> None:
    board = Board()
    assert board.place_ship(Ship("Cruiser", 3, Coordinate(0, 0), Orientation.HORIZONTAL))

    overlapping = Ship("Destroyer", 2, Coordinate(0, 1), Orientation.VERTICAL)
    assert board.place_ship(overlapping) is False

    out_of_bounds = Ship("Destroyer", 2, Coordinate(9, 9), Orientation.HORIZONTAL)
    assert board.place_ship(out_of_bounds) is False
    assert len(board.ships) == 1


def test_random_placement_populates_full_fleet_without_overlap() -> None:
    board = Board()
    board.random_placement(rng=random.Random(123))
    assert [ship.name for ship in board.ships] == [ship.name for ship in FLEET]
    coords = [coord for ship in board.ships for coord in ship.coordinates()]
    assert len(coords) == len(set(coords)), "Ships should not overlap"
    assert all(board.is_valid_coordinate(coord) for coord in coords)


def test_random_placement_degrades_to_partial_fleet() -> None:
    # A 4x4 board cannot hold the 5-cell carrier in any orientation.
    board = Board(size=4)
    board.random_placement(rng=random.Random(3))
    names = [ship.name for ship in board.ships]
    assert "Carrier" not in names
    assert len(names) < len(FLEET)


def test_random_placement_respects_attempt_budget() -> None:
    board = Board(size=8)
    board.random_placement(rng=random.Random(5), attempts=0)
    assert board.ships == []


def test_get_cell_state_defaults_to_none() -> None:
    board = Board()
    assert board.get_cell_state(Coordinate(4, 4)) is None


def test_empty_board_is_not_defeated() -> None:
    assert Board().all_ships_sunk() is False


def test_unshot_coordinates_excludes_spent_cells() -> None:
    board = Board(size=2)
    board.receive_shot(Coordinate(0, 1))
    assert board.unshot_coordinates() == [Coordinate(0, 0), Coordinate(1, 0), Coordinate(1, 1)]
