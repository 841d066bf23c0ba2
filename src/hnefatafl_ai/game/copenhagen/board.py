"""Board representation for Copenhagen Hnefatafl.

11×11盤の盤面データ構造。
対局中は CopenhagenGame が盤面を専有し、手の適用時にだけ書き換える。
評価関数（合法手生成・捕獲判定・勝敗判定）は盤面を参照で受け取り、保持しない。
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from hnefatafl_ai.game.copenhagen.errors import InvariantViolation
from hnefatafl_ai.game.copenhagen.types import (
    CORNERS,
    COLS,
    NUM_SQUARES,
    ROWS,
    THRONE,
    CellClass,
    PieceType,
    square_coords,
)

# テキスト表現の文字: 大文字 = 駒、"." "X" "+" = 空マス
PIECE_CHARS: dict[PieceType, str] = {
    PieceType.ATTACKER: "A",
    PieceType.DEFENDER: "D",
    PieceType.KING: "K",
}
_CHAR_PIECES: dict[str, PieceType | None] = {
    **{ch: pt for pt, ch in PIECE_CHARS.items()},
    ".": None,
    "X": None,  # 空の隅
    "+": None,  # 空の玉座
}


def _initial_squares() -> list[PieceType | None]:
    """Return the standard Copenhagen starting position.

    標準の初期配置を返す。

    攻撃側は四辺の中央に T 字形で 6 枚ずつ（計 24 枚）、
    防御側は王を中心にひし形に 12 枚並ぶ。
    """
    squares: list[PieceType | None] = [None] * NUM_SQUARES
    mid = ROWS // 2

    # 攻撃側: 各辺の中央 5 マス + その内側 1 マス
    for i in range(3, 8):
        for r, c in ((0, i), (ROWS - 1, i), (i, 0), (i, COLS - 1)):
            squares[r * COLS + c] = PieceType.ATTACKER
    for r, c in ((1, mid), (ROWS - 2, mid), (mid, 1), (mid, COLS - 2)):
        squares[r * COLS + c] = PieceType.ATTACKER

    # 防御側: 玉座を中心としたひし形
    for r, c in (
        (3, 5),
        (4, 4), (4, 5), (4, 6),
        (5, 3), (5, 4), (5, 6), (5, 7),
        (6, 4), (6, 5), (6, 6),
        (7, 5),
    ):
        squares[r * COLS + c] = PieceType.DEFENDER

    squares[THRONE] = PieceType.KING
    return squares


@dataclass
class Board:
    """Mutable 11x11 board.

    squares: 121要素のリスト（行優先）。squares[row * COLS + col] でアクセス。
    restricted: 王だけが止まれる隅以外のマス。構築時に固定される。
    """

    squares: list[PieceType | None] = field(default_factory=_initial_squares)
    restricted: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        if len(self.squares) != NUM_SQUARES:
            msg = f"Board needs {NUM_SQUARES} squares, got {len(self.squares)}"
            raise ValueError(msg)
        self.squares = list(self.squares)

    @classmethod
    def empty(cls, restricted: frozenset[int] = frozenset()) -> Board:
        """Return a board with no pieces on it."""
        return cls(squares=[None] * NUM_SQUARES, restricted=restricted)

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[str],
        restricted: frozenset[int] = frozenset(),
    ) -> Board:
        """Parse a board from 11 strings of 11 characters.

        テキストから盤面を作る。空白は無視する。
        "A"=攻撃、"D"=防御、"K"=王、"." "X" "+"=空マス。
        """
        cleaned = ["".join(row.split()) for row in rows]
        if len(cleaned) != ROWS or any(len(row) != COLS for row in cleaned):
            msg = f"Board text must be {ROWS} rows of {COLS} cells"
            raise ValueError(msg)
        squares: list[PieceType | None] = []
        for row in cleaned:
            for ch in row:
                if ch not in _CHAR_PIECES:
                    msg = f"Unknown board character: {ch!r}"
                    raise ValueError(msg)
                squares.append(_CHAR_PIECES[ch])
        return cls(squares=squares, restricted=restricted)

    def to_rows(self) -> list[str]:
        """Serialize to 11 strings (inverse of from_rows)."""
        rows: list[str] = []
        for r in range(ROWS):
            chars = []
            for c in range(COLS):
                piece = self.squares[r * COLS + c]
                chars.append("." if piece is None else PIECE_CHARS[piece])
            rows.append("".join(chars))
        return rows

    def copy(self) -> Board:
        return Board(squares=list(self.squares), restricted=self.restricted)

    def key(self) -> tuple[PieceType | None, ...]:
        """Hashable snapshot of the occupancy (for repetition detection)."""
        return tuple(self.squares)

    def classify(self, idx: int) -> CellClass:
        """Return the static class of cell idx.

        マスの分類を返す。玉座は常に中央、隅は四隅で固定。
        """
        if idx in CORNERS:
            return CellClass.CORNER
        if idx == THRONE:
            return CellClass.THRONE
        if idx in self.restricted:
            return CellClass.RESTRICTED
        return CellClass.NORMAL

    def occupant(self, idx: int) -> PieceType | None:
        return self.squares[idx]

    def piece_at(self, row: int, col: int) -> PieceType | None:
        """Return the piece at (row, col), or None."""
        return self.squares[row * COLS + col]

    def place(self, idx: int, piece: PieceType) -> None:
        """Put piece on an empty cell."""
        if self.squares[idx] is not None:
            msg = f"Cell {square_coords(idx)} is already occupied"
            raise ValueError(msg)
        self.squares[idx] = piece

    def remove(self, idx: int) -> PieceType | None:
        """Empty cell idx and return what was there."""
        piece = self.squares[idx]
        self.squares[idx] = None
        return piece

    def cells_between(self, a: int, b: int) -> list[int]:
        """Return the cells strictly between a and b, ordered from a to b.

        a と b の間にあるマスを a 側から順に返す（両端は含まない）。
        同じ行・列にない場合は ValueError。
        """
        ar, ac = square_coords(a)
        br, bc = square_coords(b)
        if ar != br and ac != bc:
            msg = f"{square_coords(a)} and {square_coords(b)} are not on one line"
            raise ValueError(msg)
        dr = (br > ar) - (br < ar)
        dc = (bc > ac) - (bc < ac)
        cells: list[int] = []
        r, c = ar + dr, ac + dc
        while (r, c) != (br, bc):
            cells.append(r * COLS + c)
            r += dr
            c += dc
        return cells

    def king_position_or_none(self) -> int | None:
        """Return the king's cell, or None once the king has been captured.

        王が2枚以上ある場合は InvariantViolation。
        """
        found = [idx for idx, piece in enumerate(self.squares) if piece == PieceType.KING]
        if len(found) > 1:
            msg = f"Found {len(found)} kings on the board"
            raise InvariantViolation(msg)
        return found[0] if found else None

    def king_position(self) -> int:
        """Return the king's cell; the king must be on the board."""
        idx = self.king_position_or_none()
        if idx is None:
            raise InvariantViolation("No king on the board")
        return idx

    def count(self, piece_type: PieceType) -> int:
        return sum(1 for piece in self.squares if piece == piece_type)

    @staticmethod
    def is_edge(idx: int) -> bool:
        """True if idx lies on the outer ring of the board."""
        r, c = square_coords(idx)
        return r in (0, ROWS - 1) or c in (0, COLS - 1)
