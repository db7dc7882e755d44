"""Game settings loaded from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field


def bool_from_env(*names: str) -> bool | None:
    """Return the first of ``names`` that is set, read as a boolean flag."""
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in {"1", "true", "yes", "on"}
    return None


class GameSettings(BaseModel):
    """Tunables of the match engine and its collaborators."""

    default_difficulty: Literal["easy", "medium", "hard"] = "medium"
    placement_attempts: int = Field(default=100, ge=1)
    parity_attempts: int = Field(default=100, ge=0)
    leaderboard_size: int = Field(default=10, ge=1)
    match_id_retries: int = Field(default=5, ge=1)
    rng_seed: int | None = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameSettings":
        """Construct settings from `BROADSIDE_*` env vars; ``overrides`` win."""

        data: Dict[str, Any] = {}
        env_fields = {
            "default_difficulty": "BROADSIDE_DEFAULT_DIFFICULTY",
            "placement_attempts": "BROADSIDE_PLACEMENT_ATTEMPTS",
            "parity_attempts": "BROADSIDE_PARITY_ATTEMPTS",
            "leaderboard_size": "BROADSIDE_LEADERBOARD_SIZE",
            "match_id_retries": "BROADSIDE_MATCH_ID_RETRIES",
            "rng_seed": "BROADSIDE_RNG_SEED",
        }
        for field, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                data[field] = value.strip().lower() if field == "default_difficulty" else value.strip()
        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_settings() -> GameSettings:
    """Load and cache game settings from the environment."""

    return GameSettings.from_env()
