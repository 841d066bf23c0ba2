"""Tests for the Copenhagen Hnefatafl board."""

import pytest

from hnefatafl_ai.game.copenhagen.board import Board
from hnefatafl_ai.game.copenhagen.errors import InvariantViolation
from hnefatafl_ai.game.copenhagen.types import (
    CORNERS,
    INITIAL_ATTACKERS,
    INITIAL_DEFENDERS,
    THRONE,
    CellClass,
    PieceType,
    square_index,
)


class TestInitialBoard:
    def test_piece_counts(self) -> None:
        board = Board()
        assert board.count(PieceType.ATTACKER) == INITIAL_ATTACKERS
        assert board.count(PieceType.DEFENDER) == INITIAL_DEFENDERS
        assert board.count(PieceType.KING) == 1

    def test_king_on_throne(self) -> None:
        assert Board().king_position() == THRONE

    def test_attacker_t_shape(self) -> None:
        board = Board()
        for col in range(3, 8):
            assert board.piece_at(0, col) == PieceType.ATTACKER
        assert board.piece_at(1, 5) == PieceType.ATTACKER
        assert board.piece_at(1, 4) is None

    def test_corners_empty(self) -> None:
        board = Board()
        assert all(board.occupant(c) is None for c in CORNERS)

    def test_board_is_symmetric(self) -> None:
        rows = Board().to_rows()
        assert rows == rows[::-1]
        assert rows == [row[::-1] for row in rows]


class TestClassify:
    def test_special_cells(self) -> None:
        board = Board()
        assert board.classify(THRONE) == CellClass.THRONE
        assert board.classify(0) == CellClass.CORNER
        assert board.classify(1) == CellClass.NORMAL

    def test_restricted(self) -> None:
        board = Board.empty(restricted=frozenset({square_index(2, 2)}))
        assert board.classify(square_index(2, 2)) == CellClass.RESTRICTED


class TestRows:
    def test_roundtrip(self) -> None:
        board = Board()
        assert Board.from_rows(board.to_rows()) == board

    def test_accepts_spaced_and_marked_rows(self) -> None:
        rows = ["X . . . . . . . . . X"] + ["." * 11] * 4 + [".....K....."] + ["." * 11] * 5
        board = Board.from_rows(rows)
        assert board.king_position() == THRONE

    def test_wrong_shape(self) -> None:
        with pytest.raises(ValueError):
            Board.from_rows(["." * 11] * 10)

    def test_unknown_character(self) -> None:
        rows = ["." * 11] * 10 + ["....Q......"]
        with pytest.raises(ValueError):
            Board.from_rows(rows)


class TestMutation:
    def test_place_on_occupied_raises(self) -> None:
        board = Board()
        with pytest.raises(ValueError):
            board.place(THRONE, PieceType.DEFENDER)

    def test_remove_returns_piece(self) -> None:
        board = Board()
        assert board.remove(THRONE) == PieceType.KING
        assert board.occupant(THRONE) is None

    def test_copy_is_independent(self) -> None:
        board = Board()
        other = board.copy()
        other.remove(THRONE)
        assert board.occupant(THRONE) == PieceType.KING

    def test_wrong_length_raises(self) -> None:
        with pytest.raises(ValueError):
            Board(squares=[None] * 10)


class TestKing:
    def test_no_king(self) -> None:
        board = Board.empty()
        assert board.king_position_or_none() is None
        with pytest.raises(InvariantViolation):
            board.king_position()

    def test_two_kings(self) -> None:
        board = Board.empty()
        board.place(1, PieceType.KING)
        board.place(2, PieceType.KING)
        with pytest.raises(InvariantViolation):
            board.king_position_or_none()


class TestGeometry:
    def test_cells_between_row(self) -> None:
        board = Board.empty()
        assert board.cells_between(0, 4) == [1, 2, 3]
        assert board.cells_between(4, 0) == [3, 2, 1]

    def test_cells_between_column(self) -> None:
        board = Board.empty()
        assert board.cells_between(square_index(0, 2), square_index(3, 2)) == [
            square_index(1, 2),
            square_index(2, 2),
        ]

    def test_cells_between_not_aligned(self) -> None:
        with pytest.raises(ValueError):
            Board.empty().cells_between(0, square_index(1, 1))

    def test_is_edge(self) -> None:
        assert Board.is_edge(square_index(0, 5))
        assert Board.is_edge(square_index(5, 10))
        assert not Board.is_edge(THRONE)
