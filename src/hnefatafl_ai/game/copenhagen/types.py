"""Types and constants for Copenhagen Hnefatafl (11x11).

コペンハーゲン・ルールのフネファタフル（11×11盤）の基本型・定数定義。
攻撃側（ATTACKERS）が先手で、防御側（DEFENDERS）は王を隅へ逃がすことを目指す。
"""

from __future__ import annotations

from enum import IntEnum, unique
from typing import NamedTuple

ROWS = 11
COLS = 11
NUM_SQUARES = ROWS * COLS  # 121マス

# 特殊マス: 中央の玉座と四隅
THRONE = (ROWS // 2) * COLS + COLS // 2  # (5, 5) = 60
CORNERS: frozenset[int] = frozenset(
    {0, COLS - 1, (ROWS - 1) * COLS, NUM_SQUARES - 1}
)

# 方向: 北・東・南・西の順（合法手生成の走査順を固定するため）
DIRECTIONS: tuple[tuple[int, int], ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))


@unique
class Side(IntEnum):
    """Side identifiers.

    攻撃側（ATTACKERS）が先に指す。
    """

    ATTACKERS = 0
    DEFENDERS = 1

    @property
    def opponent(self) -> Side:
        """相手側を返す。0↔1 の切り替え。"""
        return Side(1 - self.value)


@unique
class PieceType(IntEnum):
    """Piece types.

    値は to_tensor_planes() でのチャンネルインデックスに対応する。
    """

    ATTACKER = 0
    DEFENDER = 1
    KING = 2

    @property
    def side(self) -> Side:
        """駒の所属する側を返す。王は防御側。"""
        if self == PieceType.ATTACKER:
            return Side.ATTACKERS
        return Side.DEFENDERS


@unique
class CellClass(IntEnum):
    """Static classification of a board cell.

    構築時に決まり、対局中に変化しないマスの分類。
    CORNER・THRONE・RESTRICTED には王しか止まれない。
    """

    NORMAL = 0
    CORNER = 1
    THRONE = 2
    RESTRICTED = 3


@unique
class CaptureMode(IntEnum):
    """How a piece was captured (diagnostics only)."""

    CUSTODIAN = 0
    SHIELDWALL = 1
    ENCIRCLEMENT = 2  # 勝敗判定にのみ使い、CaptureSet には現れない


@unique
class OutcomeReason(IntEnum):
    """Why a game ended."""

    KING_CAPTURED = 0
    KING_ESCAPED = 1
    OPPONENT_NO_LEGAL_MOVES = 2
    DEFENDER_REPETITION = 3


class Move(NamedTuple):
    """A straight orthogonal slide from origin to destination.

    origin, destination はマスインデックス（row * COLS + col）。
    """

    origin: int
    destination: int

    @classmethod
    def from_coords(cls, from_rc: tuple[int, int], to_rc: tuple[int, int]) -> Move:
        """(row, col) の組から手を作る。"""
        return cls(square_index(*from_rc), square_index(*to_rc))


def square_index(row: int, col: int) -> int:
    """Return the flat index of (row, col)."""
    return row * COLS + col


def square_coords(idx: int) -> tuple[int, int]:
    """Return (row, col) of a flat index."""
    return idx // COLS, idx % COLS


def on_board(row: int, col: int) -> bool:
    return 0 <= row < ROWS and 0 <= col < COLS


def neighbors(idx: int) -> list[tuple[int, int, int]]:
    """Return (neighbor_idx, dr, dc) for each on-board orthogonal neighbor.

    盤内にある上下左右の隣接マスを DIRECTIONS の順で返す。
    """
    row, col = square_coords(idx)
    result: list[tuple[int, int, int]] = []
    for dr, dc in DIRECTIONS:
        nr, nc = row + dr, col + dc
        if on_board(nr, nc):
            result.append((nr * COLS + nc, dr, dc))
    return result


# 初期配置の駒数（24 攻撃 + 12 防御 + 王）
INITIAL_ATTACKERS = 24
INITIAL_DEFENDERS = 12
