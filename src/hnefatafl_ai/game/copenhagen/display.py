"""Terminal display and move notation for Copenhagen Hnefatafl.

盤面をターミナルに表示し、手を棋譜表記に変換するためのモジュール。

表記:
- 列ラベル: a〜k（左から右）
- 行ラベル: 1〜11（上から下）
- 手: "d1-d4"、駒を取った場合は "d1-d4xe5" のように取ったマスを続ける
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from hnefatafl_ai.game.copenhagen.board import PIECE_CHARS, Board
from hnefatafl_ai.game.copenhagen.types import COLS, ROWS, CellClass, Move, Side

if TYPE_CHECKING:
    from hnefatafl_ai.game.copenhagen.state import MoveRecord

# 空の特殊マスの表示文字
EMPTY_CHARS: dict[CellClass, str] = {
    CellClass.NORMAL: ".",
    CellClass.CORNER: "X",
    CellClass.THRONE: "+",
    CellClass.RESTRICTED: "#",
}

SIDE_NAMES: dict[Side, str] = {
    Side.ATTACKERS: "Attackers",
    Side.DEFENDERS: "Defenders",
}


def square_name(idx: int) -> str:
    """Convert a square index to notation, e.g. 0 -> "a1"."""
    r, c = idx // COLS, idx % COLS
    return f"{chr(ord('a') + c)}{r + 1}"


def parse_square(name: str) -> int:
    """Parse notation like "e5" back into a square index."""
    name = name.strip().lower()
    if len(name) < 2:
        msg = f"Invalid square: {name!r}"
        raise ValueError(msg)
    col = ord(name[0]) - ord("a")
    try:
        row = int(name[1:]) - 1
    except ValueError:
        msg = f"Invalid square: {name!r}"
        raise ValueError(msg) from None
    if not (0 <= row < ROWS and 0 <= col < COLS):
        msg = f"Square off the board: {name!r}"
        raise ValueError(msg)
    return row * COLS + col


def move_to_str(move: Move, captured: frozenset[int] | None = None) -> str:
    """Format a move, appending captured squares if given."""
    text = f"{square_name(move.origin)}-{square_name(move.destination)}"
    for idx in sorted(captured or ()):
        text += f"x{square_name(idx)}"
    return text


def parse_move(text: str) -> Move:
    """Parse "d1-d4" (capture suffixes are ignored)."""
    head = text.strip().split("x")[0]
    parts = head.split("-")
    if len(parts) != 2:
        msg = f"Invalid move: {text!r}"
        raise ValueError(msg)
    return Move(parse_square(parts[0]), parse_square(parts[1]))


def board_to_str(board: Board) -> str:
    """Convert a board to a human-readable string.

    盤面を人間が読みやすい文字列に変換する。

    Example output (一部):
           a b c d e f g h i j k
         1 X . . A A A A A . . X
         2 . . . . . A . . . . .
        ...
         6 A A . D D K D D . A A

    - "A" = 攻撃駒、"D" = 防御駒、"K" = 王
    - "X" = 空の隅、"+" = 空の玉座、"#" = 空の制限マス、"." = 空マス
    """
    lines: list[str] = []
    col_labels = " ".join(chr(ord("a") + c) for c in range(COLS))
    lines.append(f"   {col_labels}")
    for r in range(ROWS):
        row_chars: list[str] = []
        for c in range(COLS):
            idx = r * COLS + c
            piece = board.squares[idx]
            if piece is None:
                row_chars.append(EMPTY_CHARS[board.classify(idx)])
            else:
                row_chars.append(PIECE_CHARS[piece])
        lines.append(f"{r + 1:>2} {' '.join(row_chars)}")
    return "\n".join(lines)


def transcript_lines(records: Iterable[MoveRecord]) -> list[str]:
    """Format applied moves as numbered transcript lines.

    例: "1. Attackers d1-d4"、"12. Defenders f4-c4xc3"
    """
    return [
        f"{rec.ply}. {SIDE_NAMES[rec.side]} {move_to_str(rec.move, rec.captures.cells)}"
        for rec in records
    ]
