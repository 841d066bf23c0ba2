"""Tests for capture resolution."""

from hnefatafl_ai.game.copenhagen.board import Board
from hnefatafl_ai.game.copenhagen.captures import (
    CaptureSet,
    apply_captures,
    captures_after,
    custodian_captures,
    flood_fill,
    is_encircled,
    is_hostile_to,
    is_king_captured,
)
from hnefatafl_ai.game.copenhagen.config import RuleSet
from hnefatafl_ai.game.copenhagen.display import parse_move, parse_square
from hnefatafl_ai.game.copenhagen.types import THRONE, CaptureMode, Move, PieceType, Side

_PIECES = {"A": PieceType.ATTACKER, "D": PieceType.DEFENDER, "K": PieceType.KING}


def _after_move(pieces: dict[str, str], move: str) -> tuple[Board, Move]:
    """Place pieces, then slide one of them (no legality check)."""
    board = Board.empty()
    for name, ch in pieces.items():
        board.place(parse_square(name), _PIECES[ch])
    m = parse_move(move)
    board.place(m.destination, board.remove(m.origin))
    return board, m


class TestCaptureSet:
    def test_sorted_and_tagged(self) -> None:
        cs = CaptureSet.from_dict({9: CaptureMode.SHIELDWALL, 3: CaptureMode.CUSTODIAN})
        assert cs.entries == ((3, CaptureMode.CUSTODIAN), (9, CaptureMode.SHIELDWALL))
        assert cs.cells == {3, 9}
        assert cs.by_mode(CaptureMode.SHIELDWALL) == {9}
        assert 3 in cs
        assert 4 not in cs
        assert len(cs) == 2

    def test_empty(self) -> None:
        assert not CaptureSet()


class TestHostility:
    def test_enemy_piece(self) -> None:
        board = Board()
        assert is_hostile_to(board, THRONE, Side.ATTACKERS)
        assert not is_hostile_to(board, THRONE, Side.DEFENDERS)

    def test_empty_special_cells(self) -> None:
        board = Board.empty()
        assert is_hostile_to(board, 0, Side.ATTACKERS)
        assert is_hostile_to(board, THRONE, Side.DEFENDERS)
        assert not is_hostile_to(board, 1, Side.DEFENDERS)


class TestCustodian:
    def test_sandwich(self) -> None:
        board, move = _after_move({"e3": "D", "d3": "A", "f9": "A", "h8": "K"}, "f9-f3")
        assert custodian_captures(board, move) == {parse_square("e3"): CaptureMode.CUSTODIAN}

    def test_double_capture(self) -> None:
        board, move = _after_move(
            {"e3": "D", "g3": "D", "d3": "A", "h3": "A", "f9": "A", "h8": "K"}, "f9-f3"
        )
        assert set(custodian_captures(board, move)) == {parse_square("e3"), parse_square("g3")}

    def test_own_piece_not_captured(self) -> None:
        board, move = _after_move({"e3": "A", "d3": "A", "f9": "A", "h8": "K"}, "f9-f3")
        assert custodian_captures(board, move) == {}

    def test_edge_is_not_hostile(self) -> None:
        # a3 の外側は盤外
        board, move = _after_move({"a3": "D", "b9": "A", "h8": "K"}, "b9-b3")
        assert custodian_captures(board, move) == {}

    def test_empty_normal_cell_is_not_hostile(self) -> None:
        board, move = _after_move({"b3": "D", "c9": "A", "h8": "K"}, "c9-c3")
        assert custodian_captures(board, move) == {}

    def test_restricted_square_is_hostile(self) -> None:
        pieces = {"e3": "D", "f9": "A", "h8": "K"}
        board, move = _after_move(pieces, "f9-f3")
        restricted = Board(squares=board.squares, restricted=frozenset({parse_square("d3")}))
        assert parse_square("e3") in captures_after(restricted, move)


class TestKingCapture:
    def test_on_throne_three_is_not_enough(self) -> None:
        board = Board.empty()
        board.place(THRONE, PieceType.KING)
        for name in ("f5", "f7", "e6"):
            board.place(parse_square(name), PieceType.ATTACKER)
        assert not is_king_captured(board, THRONE, parse_square("e6"))
        board.place(parse_square("g6"), PieceType.ATTACKER)
        assert is_king_captured(board, THRONE, parse_square("g6"))

    def test_beside_throne_three(self) -> None:
        board, _ = _after_move({"f5": "K", "e5": "A", "f4": "A", "g9": "A"}, "g9-g5")
        assert is_king_captured(board, parse_square("f5"), parse_square("g5"))

    def test_against_corner(self) -> None:
        board, move = _after_move({"b1": "K", "c9": "A"}, "c9-c1")
        assert parse_square("b1") in custodian_captures(board, move)

    def test_against_edge_is_safe(self) -> None:
        board, move = _after_move({"f1": "K", "f9": "A"}, "f9-f2")
        assert custodian_captures(board, move) == {}


class TestShieldwall:
    PIECES = {
        "d11": "D", "e11": "D", "f11": "D",
        "d10": "A", "e10": "A", "f10": "A",
        "c11": "A", "g7": "A", "h5": "K",
    }

    def test_captures_row(self) -> None:
        board, move = _after_move(self.PIECES, "g7-g11")
        cs = captures_after(board, move)
        assert cs.by_mode(CaptureMode.SHIELDWALL) == {
            parse_square("d11"),
            parse_square("e11"),
            parse_square("f11"),
        }

    def test_disabled_by_rules(self) -> None:
        board, move = _after_move(self.PIECES, "g7-g11")
        assert len(captures_after(board, move, RuleSet(shieldwall=False))) == 0

    def test_single_piece_is_custodian_only(self) -> None:
        board, move = _after_move({"e11": "D", "e10": "A", "d11": "A", "f7": "A", "h5": "K"},
                                  "f7-f11")
        assert captures_after(board, move).entries == (
            (parse_square("e11"), CaptureMode.CUSTODIAN),
        )

    def test_internal_row_is_not_a_shieldwall(self) -> None:
        board, move = _after_move(
            {"d3": "D", "e3": "D", "d4": "A", "e4": "A", "c3": "A", "f9": "A", "h5": "K"},
            "f9-f3",
        )
        assert len(captures_after(board, move)) == 0

    def test_apply_removes_pieces(self) -> None:
        board, move = _after_move(self.PIECES, "g7-g11")
        cs = captures_after(board, move)
        apply_captures(board, cs)
        assert board.count(PieceType.DEFENDER) == 0
        assert board.count(PieceType.ATTACKER) == 5


class TestFloodFill:
    def test_walled_region(self) -> None:
        walls = {1, 11}
        region = flood_fill([0], lambda idx: idx not in walls)
        assert region == {0}

    def test_start_included(self) -> None:
        assert flood_fill([5], lambda idx: False) == {5}


class TestEncirclement:
    def test_open_board(self) -> None:
        assert not is_encircled(Board())

    def test_ring(self) -> None:
        ring = ["d4", "e4", "f4", "g4", "h4", "d5", "h5", "d6", "h6",
                "d7", "h7", "d8", "e8", "f8", "g8", "h8"]
        board = Board.empty()
        for name in ring:
            board.place(parse_square(name), PieceType.ATTACKER)
        board.place(THRONE, PieceType.KING)
        assert is_encircled(board)
        board.place(parse_square("b2"), PieceType.DEFENDER)
        assert not is_encircled(board)
