"""Board management and shot resolution for the Broadside engine."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum

from broadside.telemetry import get_meter, get_tracer

from .ship import FLEET, Coordinate, Orientation, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.board")
meter = get_meter("broadside.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "broadside_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "broadside_engine_shots",
    unit="1",
    description="Shots received by a board",
)

DEFAULT_PLACEMENT_ATTEMPTS = 100


class CellState(Enum):
    """Recorded outcome of a shot at a cell."""

    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"

    @property
    def is_hit(self) -> bool:
        return self is not CellState.MISS


@dataclass
class Board:
    """Represents one player's grid: their fleet and every shot fired at it."""

    size: int = 10
    ships: list[Ship] = field(default_factory=list)
    shots: dict[Coordinate, CellState] = field(default_factory=dict)
    owner: str = "unknown"

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        """Check whether a coordinate lies inside the board boundaries."""
        return 0 <= coord.row < self.size and 0 <= coord.col < self.size

    def can_place_ship(self, ship: Ship) -> bool:
        """A ship fits when every cell is on the board and no cell is taken."""
        if not all(self.is_valid_coordinate(coord) for coord in ship.coordinates()):
            return False
        return not any(ship.overlaps(existing) for existing in self.ships)

    def place_ship(self, ship: Ship) -> bool:
        """Add ship to the board if placement is valid."""
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.name", ship.name)
            span.set_attribute("ship.size", ship.size)
            span.set_attribute("ship.start.row", ship.start.row)
            span.set_attribute("ship.start.col", ship.start.col)
            span.set_attribute("board.owner", self.owner)
            details = {
                "owner": self.owner,
                "ship_name": ship.name,
                "orientation": ship.orientation.name,
                "row": ship.start.row,
                "col": ship.start.col,
            }
            if self.can_place_ship(ship):
                self.ships.append(ship)
                PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
                logger.debug("ship_placed", extra=details)
                return True
            PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
            logger.warning("ship_placement_failed", extra=details)
            return False

    def ship_at(self, coord: Coordinate) -> Ship | None:
        """Return the ship covering ``coord``, if any."""
        for ship in self.ships:
            if ship.occupies(coord):
                return ship
        return None

    def receive_shot(self, coord: Coordinate) -> tuple[CellState, Ship | None]:
        """Resolve a shot at this board and return its outcome.

        A cell that has already been fired upon returns its recorded outcome
        without touching any hit count, so repeated fire is idempotent.
        Otherwise the struck ship (if any) takes one hit and the outcome is
        recorded before returning. Callers are responsible for bounds checks.
        """
        with tracer.start_as_current_span("board.receive_shot") as span:
            span.set_attribute("shot.row", coord.row)
            span.set_attribute("shot.col", coord.col)
            span.set_attribute("board.owner", self.owner)

            cached = self.shots.get(coord)
            if cached is not None:
                span.set_attribute("shot.outcome", cached.value)
                span.set_attribute("shot.repeat", True)
                logger.debug(
                    "shot_repeat",
                    extra={"row": coord.row, "col": coord.col, "owner": self.owner},
                )
                return cached, self.ship_at(coord)

            ship = self.ship_at(coord)
            if ship is None:
                self.shots[coord] = CellState.MISS
                span.set_attribute("shot.outcome", "miss")
                SHOT_COUNTER.add(1, attributes={"outcome": "miss", "owner": self.owner})
                logger.debug(
                    "shot_miss", extra={"row": coord.row, "col": coord.col, "owner": self.owner}
                )
                return CellState.MISS, None

            ship.hits += 1
            state = CellState.SUNK if ship.hits == ship.size else CellState.HIT
            self.shots[coord] = state
            span.set_attribute("shot.outcome", state.value)
            SHOT_COUNTER.add(1, attributes={"outcome": state.value, "owner": self.owner})
            logger.info(
                "shot_sunk" if state is CellState.SUNK else "shot_hit",
                extra={
                    "row": coord.row,
                    "col": coord.col,
                    "ship_name": ship.name,
                    "owner": self.owner,
                },
            )
            return state, ship

    def get_cell_state(self, coord: Coordinate) -> CellState | None:
        """Return the recorded outcome at ``coord``, or None if never fired upon."""
        return self.shots.get(coord)

    def all_ships_sunk(self) -> bool:
        """True once a non-empty fleet has been sunk entirely."""
        return bool(self.ships) and all(ship.is_sunk() for ship in self.ships)

    def unshot_coordinates(self) -> list[Coordinate]:
        """Return every in-bounds coordinate that has not been fired upon, row-major."""
        return [
            Coordinate(row, col)
            for row in range(self.size)
            for col in range(self.size)
            if Coordinate(row, col) not in self.shots
        ]

    def random_placement(
        self, rng: random.Random, attempts: int = DEFAULT_PLACEMENT_ATTEMPTS
    ) -> None:
        """Randomly place the standard fleet, replacing any ships already on the board.

        Each ship gets at most ``attempts`` random (orientation, row, col)
        draws. A ship that never fits is left out and the fleet is shorter.
        """
        with tracer.start_as_current_span("board.random_placement") as span:
            span.set_attribute("board.owner", self.owner)
            self.ships.clear()
            for ship_class in FLEET:
                placed = False
                tries = 0
                while not placed and tries < attempts:
                    tries += 1
                    orientation = rng.choice(list(Orientation))
                    start = Coordinate(rng.randrange(self.size), rng.randrange(self.size))
                    candidate = Ship.from_class(ship_class, start, orientation)
                    if self.can_place_ship(candidate):
                        placed = self.place_ship(candidate)
                if placed:
                    logger.debug(
                        "random_ship_placed",
                        extra={"ship_name": ship_class.name, "attempts": tries, "owner": self.owner},
                    )
                else:
                    logger.warning(
                        "random_ship_placement_exhausted",
                        extra={"ship_name": ship_class.name, "attempts": tries, "owner": self.owner},
                    )
            span.set_attribute("board.ships", len(self.ships))
