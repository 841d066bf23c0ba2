"""Legal move generation for Copenhagen Hnefatafl.

合法手の生成と手のエンコード/デコード。

すべての駒は飛車のように縦横に何マスでも滑る。駒を飛び越えることはできない。
- 隅（CORNER）には王しか止まれない
- 玉座（THRONE）・制限マス（RESTRICTED）にも王しか止まれないが、
  空いていれば他の駒も通過できる

手のエンコード（整数値への変換）:
  origin * 121 + destination  (0〜14640)
"""

from __future__ import annotations

from typing import Final

from hnefatafl_ai.game.copenhagen.board import Board
from hnefatafl_ai.game.copenhagen.types import (
    COLS,
    DIRECTIONS,
    NUM_SQUARES,
    CellClass,
    Move,
    PieceType,
    Side,
    on_board,
    square_coords,
)

ACTION_SPACE: Final[int] = NUM_SQUARES * NUM_SQUARES  # = 14641


def encode_move(move: Move) -> int:
    """Encode a move as an integer action."""
    return move.origin * NUM_SQUARES + move.destination


def decode_move(action: int) -> Move:
    """Decode an integer action back into a Move."""
    if not 0 <= action < ACTION_SPACE:
        msg = f"Action out of range: {action}"
        raise ValueError(msg)
    return Move(action // NUM_SQUARES, action % NUM_SQUARES)


def can_land(board: Board, piece: PieceType, idx: int) -> bool:
    """Whether piece may stop on cell idx (occupancy aside).

    王以外は隅・玉座・制限マスに止まれない。
    """
    if piece == PieceType.KING:
        return True
    return board.classify(idx) == CellClass.NORMAL


def legal_destinations(board: Board, origin: int) -> list[int]:
    """Return every cell the piece on origin can slide to.

    1つの駒の移動先を N, E, S, W の順に返す（ハイライト表示用）。
    空マスなら空リスト。
    """
    piece = board.squares[origin]
    if piece is None:
        return []
    row, col = square_coords(origin)
    dests: list[int] = []
    for dr, dc in DIRECTIONS:
        nr, nc = row + dr, col + dc
        # 空マスが続く限り滑る。駒があればそこで止まる
        while on_board(nr, nc):
            idx = nr * COLS + nc
            if board.squares[idx] is not None:
                break
            if can_land(board, piece, idx):
                dests.append(idx)
            nr += dr
            nc += dc
    return dests


def legal_moves(board: Board, side: Side) -> list[Move]:
    """Generate all legal moves for side.

    手番側のすべての合法手を生成する。
    盤面を行優先で走査し、各駒について N, E, S, W の順に滑らせるので順序は決定的。
    動ける駒がなければ空リストを返す（負けの判定は outcome 側で行う）。
    """
    moves: list[Move] = []
    for idx, piece in enumerate(board.squares):
        if piece is None or piece.side != side:
            continue
        for dest in legal_destinations(board, idx):
            moves.append(Move(idx, dest))
    return moves


def is_legal(board: Board, side: Side, move: Move) -> bool:
    """Check a single move without generating the whole move list."""
    origin, dest = move
    if not (0 <= origin < NUM_SQUARES and 0 <= dest < NUM_SQUARES) or origin == dest:
        return False
    piece = board.squares[origin]
    if piece is None or piece.side != side:
        return False
    if board.squares[dest] is not None or not can_land(board, piece, dest):
        return False
    try:
        path = board.cells_between(origin, dest)
    except ValueError:
        return False  # 斜め・不規則な移動
    return all(board.squares[idx] is None for idx in path)


def has_legal_move(board: Board, side: Side) -> bool:
    """True if side has at least one legal move (stops at the first)."""
    for idx, piece in enumerate(board.squares):
        if piece is not None and piece.side == side and legal_destinations(board, idx):
            return True
    return False
