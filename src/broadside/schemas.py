"""Request payloads accepted by the game API, validated with pydantic."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from broadside.engine.ship import MAX_SHIP_SIZE, MIN_SHIP_SIZE, Coordinate, Orientation, Ship
from broadside.engine.targeting import Difficulty

_ORIENTATION_ALIASES = {
    "h": Orientation.HORIZONTAL,
    "hor": Orientation.HORIZONTAL,
    "horizontal": Orientation.HORIZONTAL,
    "v": Orientation.VERTICAL,
    "ver": Orientation.VERTICAL,
    "vertical": Orientation.VERTICAL,
}


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")


class CreateGameRequest(_Request):
    player_id: str = Field(min_length=1)
    difficulty: Difficulty = Difficulty.MEDIUM
    single_player: bool = True

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalise_difficulty(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class JoinGameRequest(_Request):
    game_id: str = Field(min_length=1)
    player_id: str = Field(min_length=1)


class RestartGameRequest(_Request):
    player_id: str = Field(min_length=1)


class ShipPlacementRequest(_Request):
    """One ship of a fleet submission, anchored at its top/left-most cell."""

    name: str = Field(min_length=1)
    size: int = Field(ge=MIN_SHIP_SIZE, le=MAX_SHIP_SIZE)
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    orientation: Orientation

    @field_validator("orientation", mode="before")
    @classmethod
    def _normalise_orientation(cls, value: Any) -> Any:
        if isinstance(value, str):
            alias = _ORIENTATION_ALIASES.get(value.strip().lower())
            if alias is not None:
                return alias
        return value

    def to_ship(self) -> Ship:
        return Ship(self.name, self.size, Coordinate(self.row, self.col), self.orientation)


class PlaceShipsRequest(_Request):
    game_id: str = Field(min_length=1)
    player_id: str = Field(min_length=1)
    ships: list[ShipPlacementRequest] = Field(min_length=1)


class ShootRequest(_Request):
    game_id: str = Field(min_length=1)
    player_id: str = Field(min_length=1)
    row: int = Field(ge=0)
    col: int = Field(ge=0)

    @property
    def target(self) -> Coordinate:
        return Coordinate(self.row, self.col)
