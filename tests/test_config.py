"""Game settings loading."""

import pytest
from pydantic import ValidationError

from broadside import config as config_module
from broadside.config import GameSettings, bool_from_env

SETTINGS_ENV = [
    "BROADSIDE_DEFAULT_DIFFICULTY",
    "BROADSIDE_PLACEMENT_ATTEMPTS",
    "BROADSIDE_PARITY_ATTEMPTS",
    "BROADSIDE_LEADERBOARD_SIZE",
    "BROADSIDE_MATCH_ID_RETRIES",
    "BROADSIDE_RNG_SEED",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = GameSettings.from_env()
    assert settings == GameSettings()
    assert settings.default_difficulty == "medium"
    assert settings.placement_attempts == 100
    assert settings.leaderboard_size == 10
    assert settings.rng_seed is None


def test_env_values_are_parsed(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("BROADSIDE_DEFAULT_DIFFICULTY", " HARD ")
    clean_env.setenv("BROADSIDE_PARITY_ATTEMPTS", "25")
    clean_env.setenv("BROADSIDE_RNG_SEED", "7")
    clean_env.setenv("BROADSIDE_LEADERBOARD_SIZE", "  ")

    settings = GameSettings.from_env(leaderboard_size=3)
    assert settings.default_difficulty == "hard"
    assert settings.parity_attempts == 25
    assert settings.rng_seed == 7
    assert settings.leaderboard_size == 3


def test_invalid_env_values_are_rejected(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("BROADSIDE_PLACEMENT_ATTEMPTS", "0")
    with pytest.raises(ValidationError):
        GameSettings.from_env()


def test_load_game_settings_is_cached(clean_env: pytest.MonkeyPatch) -> None:
    config_module.load_game_settings.cache_clear()
    clean_env.setenv("BROADSIDE_RNG_SEED", "11")
    first = config_module.load_game_settings()
    clean_env.setenv("BROADSIDE_RNG_SEED", "12")
    assert config_module.load_game_settings() is first
    assert first.rng_seed == 11
    config_module.load_game_settings.cache_clear()


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("TRUE", True), ("on", True), ("0", False), ("nope", False)],
)
def test_bool_from_env(monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
    monkeypatch.delenv("FIRST_FLAG", raising=False)
    monkeypatch.setenv("SECOND_FLAG", value)
    assert bool_from_env("FIRST_FLAG", "SECOND_FLAG") is expected


def test_bool_from_env_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIRST_FLAG", raising=False)
    assert bool_from_env("FIRST_FLAG") is None
