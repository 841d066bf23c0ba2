"""Tests for the command line interface."""

import pytest

from hnefatafl_ai import cli


def test_self_test_exits_cleanly(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--self-test"])
    assert exc.value.code == 0
    assert "ok=True" in capsys.readouterr().out


def test_abort_on_eof(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    def eof(_prompt: str) -> str:
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)
    cli.main(["--side", "attackers", "--seed", "1"])
    assert "Game aborted." in capsys.readouterr().out


def test_plays_notation_move(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    answers = iter(["zz", "d1-d2"])

    def answer(_prompt: str) -> str:
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", answer)
    cli.main(["--side", "attackers", "--seed", "1"])
    out = capsys.readouterr().out
    assert "You play: d1-d2" in out
    assert "AI plays:" in out
