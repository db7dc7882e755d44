"""Ship domain model for the Broadside engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate."""

    row: int
    col: int

    def neighbours(self) -> tuple[Coordinate, ...]:
        """Return the 4-neighbourhood (up, down, left, right), unchecked for bounds."""
        return (
            Coordinate(self.row - 1, self.col),
            Coordinate(self.row + 1, self.col),
            Coordinate(self.row, self.col - 1),
            Coordinate(self.row, self.col + 1),
        )


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class ShipClass:
    """Name and length of a ship in the standard fleet."""

    name: str
    length: int


FLEET: tuple[ShipClass, ...] = (
    ShipClass("Carrier", 5),
    ShipClass("Battleship", 4),
    ShipClass("Cruiser", 3),
    ShipClass("Submarine", 3),
    ShipClass("Destroyer", 2),
)

MIN_SHIP_SIZE = 2
MAX_SHIP_SIZE = 5


def ship_coordinates(start: Coordinate, size: int, orientation: Orientation) -> tuple[Coordinate, ...]:
    """Return the cells covered by a ship of ``size`` laid out from ``start``."""
    if orientation is Orientation.HORIZONTAL:
        return tuple(Coordinate(start.row, start.col + offset) for offset in range(size))
    return tuple(Coordinate(start.row + offset, start.col) for offset in range(size))


@dataclass
class Ship:
    """Represents a single ship instance on the board.

    Occupied cells are derived once from ``start``/``orientation``/``size``.
    ``hits`` is a plain counter: shot resolution increments it and undo
    decrements it, so it is the only mutable part of a ship.
    """

    name: str
    size: int
    start: Coordinate
    orientation: Orientation
    hits: int = 0
    _coordinates: tuple[Coordinate, ...] = field(init=False, repr=False)
    _coordinate_set: frozenset[Coordinate] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._coordinates = ship_coordinates(self.start, self.size, self.orientation)
        self._coordinate_set = frozenset(self._coordinates)

    @classmethod
    def from_class(
        cls, ship_class: ShipClass, start: Coordinate, orientation: Orientation
    ) -> Ship:
        return cls(ship_class.name, ship_class.length, start, orientation)

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered list of coordinates occupied by this ship."""
        return list(self._coordinates)

    def occupies(self, coord: Coordinate) -> bool:
        return coord in self._coordinate_set

    def is_sunk(self) -> bool:
        """A ship is sunk once it has taken at least ``size`` hits."""
        return self.hits >= self.size

    def overlaps(self, other: Ship) -> bool:
        """Return True if any coordinate overlaps with another ship."""
        return bool(self._coordinate_set & other._coordinate_set)
