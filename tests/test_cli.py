"""Command-line client tests with scripted input."""

from __future__ import annotations

import random
from typing import Iterable
from unittest.mock import MagicMock

import pytest

from broadside import cli
from broadside.engine.game import create_match
from broadside.engine.ship import Coordinate
from broadside.engine.targeting import Difficulty


def _script(monkeypatch: pytest.MonkeyPatch, answers: Iterable[str]) -> None:
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(replies))


@pytest.mark.parametrize(
    ("text", "expected"),
    [("A1", Coordinate(0, 0)), ("j10", Coordinate(9, 9)), (" c5 ", Coordinate(2, 4)), ("3 7", Coordinate(3, 7))],
)
def test_coordinate_parsing(text: str, expected: Coordinate) -> None:
    assert cli._coordinate_from_input(text, 10) == expected


@pytest.mark.parametrize("text", ["", "K1", "A0", "A11", "Ax", "1", "10 2"])
def test_coordinate_parsing_rejects_bad_input(text: str) -> None:
    with pytest.raises(ValueError):
        cli._coordinate_from_input(text, 10)


def test_quit_right_away(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _script(monkeypatch, ["", "q"])
    cli.play_game(difficulty=Difficulty.EASY, seed=3)
    out = capsys.readouterr().out
    assert "8x8 board (easy)" in out
    assert "positioned automatically" in out
    assert "Goodbye!" in out


def test_shot_undo_and_leaderboard(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _script(monkeypatch, ["n", "A1", "A1", "u", "u", "l", "q"])
    cli.play_game(seed=4)
    out = capsys.readouterr().out
    assert "player fired at A1" in out
    assert "The AI fired at" in out
    assert "That shot is not allowed" in out
    assert "Nothing to undo." in out
    assert "No wins recorded yet." in out


def test_main_parses_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    play = MagicMock()
    console = MagicMock()
    monkeypatch.setattr(cli, "play_game", play)
    monkeypatch.setattr(cli, "configure_console_logging", console)

    cli.main(["--seed", "9", "--difficulty", "hard", "--player", "ann"])

    play.assert_called_once_with(player_id="ann", difficulty=Difficulty.HARD, seed=9)
    console.assert_called_once_with(cli.logging.WARNING)


def test_main_with_telemetry_shuts_down_after_play(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(cli, "configure_console_logging", MagicMock())
    monkeypatch.setattr(cli, "load_telemetry_config", lambda: "config")
    monkeypatch.setattr(cli, "init_telemetry", lambda config: calls.append(f"init:{config}"))
    monkeypatch.setattr(cli, "LoggingInstrumentor", MagicMock())
    monkeypatch.setattr(cli, "shutdown_telemetry", lambda: calls.append("shutdown"))

    def boom(**_kwargs):
        calls.append("play")
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "play_game", boom)
    with pytest.raises(KeyboardInterrupt):
        cli.main(["--telemetry", "--verbose"])
    assert calls == ["init:config", "play", "shutdown"]


def test_vanished_game_ends_the_session(monkeypatch: pytest.MonkeyPatch) -> None:
    service = MagicMock()
    service.create_game.return_value = create_match("player", rng=random.Random(1))
    service.get_view.return_value = None
    _script(monkeypatch, [""])
    with pytest.raises(SystemExit, match="no longer available"):
        cli.play_game(seed=1, service=service)
