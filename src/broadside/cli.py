"""Command-line client for playing Broadside against the computer."""

from __future__ import annotations

import argparse
import logging
import random
from typing import Sequence

from opentelemetry.instrumentation.logging import LoggingInstrumentor

from broadside.config import GameSettings
from broadside.engine.board import Board, CellState
from broadside.engine.game import AI_PLAYER_ID, MatchStatus
from broadside.engine.ship import FLEET, Coordinate, Orientation, Ship, ShipClass, ship_coordinates
from broadside.engine.targeting import Difficulty
from broadside.service import GameService
from broadside.telemetry import (
    configure_console_logging,
    init_telemetry,
    load_telemetry_config,
    shutdown_telemetry,
)
from broadside.views import MatchView, MoveView

ROW_LABELS = "ABCDEFGHIJKL"
CELL_SYMBOLS = {CellState.MISS: "o", CellState.HIT: "X", CellState.SUNK: "#"}


def _coordinate_from_input(text: str, size: int) -> Coordinate:
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    labels = ROW_LABELS[:size]
    if cleaned[0].isalpha():
        if cleaned[0] not in labels:
            raise ValueError(f"Row must be between A and {labels[-1]}.")
        row = labels.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError(f"Column must be a number between 1 and {size}.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        row, col = map(int, parts)
    if row not in range(size) or col not in range(size):
        raise ValueError(f"Coordinates must be within the {size}x{size} board.")
    return Coordinate(row, col)


def _label(coord: Coordinate) -> str:
    return f"{ROW_LABELS[coord.row]}{coord.col + 1}"


def _format_grid(size: int, shots: dict[Coordinate, CellState], ship_cells: set[Coordinate]) -> str:
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(size))
    rows = [header]
    for row in range(size):
        symbols = []
        for col in range(size):
            coord = Coordinate(row, col)
            state = shots.get(coord)
            if state is not None:
                symbol = CELL_SYMBOLS[state]
            else:
                symbol = "S" if coord in ship_cells else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(rows)


def _own_waters(view: MatchView) -> str:
    ship_cells = {
        coord
        for ship in view.my_fleet
        for coord in ship_coordinates(Coordinate(ship.row, ship.col), ship.size, ship.orientation)
    }
    shots = {Coordinate(shot.row, shot.col): shot.state for shot in view.opponent_shots}
    return _format_grid(view.board_size, shots, ship_cells)


def _enemy_waters(view: MatchView) -> str:
    shots = {Coordinate(shot.row, shot.col): shot.state for shot in view.my_shots}
    return _format_grid(view.board_size, shots, set())


def _describe_move(move: MoveView) -> str:
    who = "The AI" if move.player_id == AI_PLAYER_ID else move.player_id
    outcome = move.result.value
    if move.result is CellState.SUNK and move.sunk_ship_name:
        outcome = f"sank the {move.sunk_ship_name.lower()}!"
    return f"{who} fired at {_label(Coordinate(move.row, move.col))}: {outcome}"


def _prompt_orientation(ship_class: ShipClass) -> Orientation:
    while True:
        raw = (
            input(f"Place your {ship_class.name} (length {ship_class.length}). Orientation [H/V]: ")
            .strip()
            .upper()
        )
        if raw in {"H", "HOR", "HORIZONTAL"}:
            return Orientation.HORIZONTAL
        if raw in {"V", "VER", "VERTICAL"}:
            return Orientation.VERTICAL
        print("Please enter H for horizontal or V for vertical.")


def _manual_fleet(size: int) -> list[Ship]:
    board = Board(size=size, owner="player1")
    for ship_class in FLEET:
        while True:
            print("\nCurrent layout:")
            print(_format_grid(size, {}, {c for ship in board.ships for c in ship.coordinates()}))
            orientation = _prompt_orientation(ship_class)
            try:
                start = _coordinate_from_input(input("Enter starting coordinate (e.g., A1): "), size)
            except ValueError as exc:
                print(f"Invalid coordinate: {exc}")
                continue
            ship = Ship.from_class(ship_class, start, orientation)
            if board.can_place_ship(ship):
                board.place_ship(ship)
                break
            print("Ship cannot be placed there (out of bounds or overlaps). Try again.")
    return board.ships


def _random_fleet(size: int, rng: random.Random) -> list[Ship]:
    board = Board(size=size, owner="player1")
    board.random_placement(rng)
    return board.ships


def _prompt_manual_setup() -> bool:
    while True:
        raw = input("Would you like to place your ships manually? [y/N]: ").strip().lower()
        if raw in {"y", "yes"}:
            return True
        if raw in {"", "n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def _setup_fleet(service: GameService, match_id: str, player_id: str, size: int, rng: random.Random) -> None:
    if _prompt_manual_setup():
        fleet = _manual_fleet(size)
    else:
        fleet = _random_fleet(size, rng)
        print("\nYour ships have been positioned automatically.")
    service.place_ships(match_id, player_id, fleet)


def _print_leaderboard(service: GameService) -> None:
    entries = service.leaderboard_top()
    if not entries:
        print("No wins recorded yet.")
        return
    for rank, entry in enumerate(entries, start=1):
        print(f"{rank:>2}. {entry.player_id:<20} {entry.wins}")


def _read_command(size: int) -> str | Coordinate:
    while True:
        raw = input("Target (e.g., A5), [u]ndo, [r]estart, [l]eaderboard or [q]uit: ").strip()
        if raw.lower() in {"q", "u", "r", "l"}:
            return raw.lower()
        try:
            return _coordinate_from_input(raw, size)
        except ValueError as exc:
            print(f"Invalid input: {exc}")


def play_game(
    player_id: str = "player",
    difficulty: Difficulty = Difficulty.MEDIUM,
    seed: int | None = None,
    service: GameService | None = None,
) -> None:
    print("Welcome to Broadside!\n")
    rng = random.Random(seed)
    service = service or GameService(settings=GameSettings(rng_seed=seed))
    match = service.create_game(player_id, single_player=True, difficulty=difficulty)
    if match is None:
        raise SystemExit(f"Cannot start a game as {player_id!r}.")
    match_id = match.match_id
    size = match.board_size
    print(f"Game {match_id} on a {size}x{size} board ({difficulty.value}).")
    _setup_fleet(service, match_id, player_id, size, rng)

    while True:
        view = service.get_view(match_id, player_id)
        if view is None:
            raise SystemExit(f"Game {match_id} is no longer available.")
        if view.status is MatchStatus.FINISHED:
            if view.winner_id == player_id:
                print("\nCongratulations, you won!")
            else:
                print("\nThe AI won this time. Better luck next battle!")
            again = input("Play again? [y/N]: ").strip().lower()
            if again not in {"y", "yes"} or service.restart(match_id, player_id) is None:
                break
            _setup_fleet(service, match_id, player_id, size, rng)
            continue

        print("\nYour Board:")
        print(_own_waters(view))
        print("\nEnemy Waters:")
        print(_enemy_waters(view))

        command = _read_command(size)
        if command == "q":
            print("Goodbye!")
            return
        if command == "l":
            _print_leaderboard(service)
            continue
        if command == "u":
            if service.undo(match_id) is None:
                print("Nothing to undo.")
            continue
        if command == "r":
            if service.restart(match_id, player_id) is not None:
                _setup_fleet(service, match_id, player_id, size, rng)
            continue

        before = len(view.history)
        result = service.shoot(match_id, player_id, command)
        if result is None:
            print("That shot is not allowed. Pick a cell you have not fired at.")
            continue
        for move in result.history[before:]:
            print(_describe_move(move))

    _print_leaderboard(service)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Broadside against the computer.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--difficulty",
        choices=[difficulty.value for difficulty in Difficulty],
        default=Difficulty.MEDIUM.value,
        help="AI skill tier; also sets the board size (8, 10 or 12).",
    )
    parser.add_argument("--player", default="player", help="Your player id on the leaderboard.")
    parser.add_argument(
        "--telemetry",
        action="store_true",
        help="Export traces, metrics and logs using the OTEL_* environment settings.",
    )
    parser.add_argument("--verbose", action="store_true", help="Show engine log output.")
    args = parser.parse_args(argv)

    configure_console_logging(logging.INFO if args.verbose else logging.WARNING)
    if args.telemetry:
        init_telemetry(load_telemetry_config())
        LoggingInstrumentor().instrument()
    try:
        play_game(player_id=args.player, difficulty=Difficulty(args.difficulty), seed=args.seed)
    finally:
        if args.telemetry:
            shutdown_telemetry()


if __name__ == "__main__":
    main()
