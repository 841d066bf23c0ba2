"""Tests for random player."""

import random

import pytest

from hnefatafl_ai.engine.random_player import random_move
from hnefatafl_ai.game.copenhagen.scenarios import play, setup_game
from hnefatafl_ai.game.copenhagen.state import CopenhagenGame
from hnefatafl_ai.game.copenhagen.types import CellClass, PieceType, Side


def test_returns_legal_move() -> None:
    game = CopenhagenGame()
    move = random_move(game)
    assert move in game.legal_moves()


def test_seeded_choice_is_reproducible() -> None:
    game = CopenhagenGame()
    assert random_move(game, random.Random(7)) == random_move(game, random.Random(7))


def test_covers_all_moves() -> None:
    """Uniform choice should reach every move of a small position."""
    game = setup_game({"b2": "A", "h8": "K"})
    rng = random.Random(0)
    seen = {random_move(game, rng) for _ in range(500)}
    assert seen == set(game.legal_moves())


def test_no_legal_moves_raises() -> None:
    game = setup_game({"a5": "K", "f3": "A"}, side=Side.DEFENDERS)
    play(game, "a5-a1")
    with pytest.raises(ValueError):
        random_move(game)


def test_game_completes() -> None:
    """Random vs random games keep every chosen move legal until the end."""
    game = CopenhagenGame()
    rng = random.Random(1)
    for _ in range(300):
        if game.is_terminal:
            break
        move = random_move(game, rng)
        assert move in game.legal_moves()
        game.apply_move(move)
    assert len(game.moves) > 0


@pytest.mark.parametrize("seed", range(5))
def test_non_king_never_lands_on_special_cells(seed: int) -> None:
    """Along random playouts, only the king is ever offered a corner or the throne."""
    game = CopenhagenGame()
    rng = random.Random(seed)
    for _ in range(200):
        if game.is_terminal:
            break
        board = game.board
        for move in game.legal_moves():
            if board.occupant(move.origin) != PieceType.KING:
                assert board.classify(move.destination) == CellClass.NORMAL
        game.apply_move(random_move(game, rng))
