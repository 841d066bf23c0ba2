"""Capture resolution for Copenhagen Hnefatafl.

捕獲判定。手を盤面に反映した直後に呼び出し、取られる駒をすべて求める。

捕獲の種類:
1. 挟み取り（CUSTODIAN）: 動いた駒と味方駒（または敵対マス）で相手駒を挟む
2. 盾壁（SHIELDWALL）: 盤端に並んだ防御側の列をまとめて取る
3. 包囲（ENCIRCLEMENT）: 駒を取るのではなく勝敗判定に使う（outcome.py）

いずれも盤面を読むだけで、取り除くのは apply_captures() の役目。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from hnefatafl_ai.game.copenhagen.board import Board
from hnefatafl_ai.game.copenhagen.config import COPENHAGEN, RuleSet
from hnefatafl_ai.game.copenhagen.types import (
    COLS,
    ROWS,
    THRONE,
    CaptureMode,
    CellClass,
    Move,
    PieceType,
    Side,
    neighbors,
    on_board,
    square_coords,
)

logger = logging.getLogger(__name__)

# 空いていれば敵対マスとして扱うマス分類
_HOSTILE_CLASSES = (CellClass.CORNER, CellClass.THRONE, CellClass.RESTRICTED)


@dataclass(frozen=True)
class CaptureSet:
    """Cells emptied by one move, tagged by capture mode.

    entries: (マスインデックス, 捕獲モード) のタプル。マスの昇順。
    """

    entries: tuple[tuple[int, CaptureMode], ...] = ()

    @classmethod
    def from_dict(cls, captured: dict[int, CaptureMode]) -> CaptureSet:
        return cls(tuple(sorted(captured.items())))

    @property
    def cells(self) -> frozenset[int]:
        return frozenset(idx for idx, _ in self.entries)

    def by_mode(self, mode: CaptureMode) -> frozenset[int]:
        return frozenset(idx for idx, m in self.entries if m == mode)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, idx: object) -> bool:
        return any(cell == idx for cell, _ in self.entries)


def flood_fill(starts: Iterable[int], passable: Callable[[int], bool]) -> set[int]:
    """Return every cell reachable from starts through passable cells.

    明示的な visited 集合とスタックによる塗りつぶし（再帰は使わない）。
    開始マス自体は passable でなくても結果に含まれる。
    """
    visited = set(starts)
    stack = list(visited)
    while stack:
        idx = stack.pop()
        for nidx, _, _ in neighbors(idx):
            if nidx not in visited and passable(nidx):
                visited.add(nidx)
                stack.append(nidx)
    return visited


def is_hostile_to(board: Board, idx: int, victim_side: Side) -> bool:
    """Whether cell idx can act as the far side of a sandwich against victim_side.

    挟み取りの反対側として機能するか:
    - 相手側の駒（王も武装しているので防御側の駒として数える）
    - 隅（常に敵対）
    - 空の玉座
    - 制限マス
    """
    piece = board.squares[idx]
    if piece is not None:
        return piece.side != victim_side
    return board.classify(idx) in _HOSTILE_CLASSES


def is_king_captured(board: Board, king_idx: int, attacker_idx: int) -> bool:
    """Check whether the attacker that just arrived on attacker_idx captures the king.

    王の捕獲条件は王の位置で変わる:
    - 玉座の上: 四方すべてが攻撃駒
    - 玉座の隣: 玉座以外の三方が攻撃駒（空の玉座が四方目の敵対マス）
    - それ以外: 通常の挟み取り（攻撃駒・隅・制限マスとの二方挟み）
    """
    adjacent = neighbors(king_idx)
    if king_idx == THRONE:
        return all(board.squares[n] == PieceType.ATTACKER for n, _, _ in adjacent)

    if any(n == THRONE for n, _, _ in adjacent):
        return all(
            board.squares[n] == PieceType.ATTACKER
            for n, _, _ in adjacent
            if n != THRONE
        )

    kr, kc = square_coords(king_idx)
    ar, ac = square_coords(attacker_idx)
    br, bc = kr + (kr - ar), kc + (kc - ac)
    if not on_board(br, bc):
        return False  # 盤端は敵対マスではない
    beyond = br * COLS + bc
    piece = board.squares[beyond]
    if piece is not None:
        return piece == PieceType.ATTACKER
    return board.classify(beyond) in (CellClass.CORNER, CellClass.RESTRICTED)


def custodian_captures(board: Board, move: Move) -> dict[int, CaptureMode]:
    """Find pieces sandwiched by the piece that just moved."""
    dest = move.destination
    mover = board.squares[dest]
    captured: dict[int, CaptureMode] = {}
    if mover is None:
        return captured

    for nidx, dr, dc in neighbors(dest):
        victim = board.squares[nidx]
        if victim is None or victim.side == mover.side:
            continue  # 空マスまたは味方
        if victim == PieceType.KING:
            if is_king_captured(board, nidx, dest):
                captured[nidx] = CaptureMode.CUSTODIAN
            continue
        r, c = square_coords(nidx)
        br, bc = r + dr, c + dc
        if not on_board(br, bc):
            continue
        if is_hostile_to(board, br * COLS + bc, victim.side):
            captured[nidx] = CaptureMode.CUSTODIAN
    return captured


def _edge_geometry(idx: int) -> tuple[tuple[int, int], list[tuple[int, int]]] | None:
    """Return (inward direction, along-edge directions) for an edge cell."""
    r, c = square_coords(idx)
    if r == 0:
        return (1, 0), [(0, -1), (0, 1)]
    if r == ROWS - 1:
        return (-1, 0), [(0, -1), (0, 1)]
    if c == 0:
        return (0, 1), [(-1, 0), (1, 0)]
    if c == COLS - 1:
        return (0, -1), [(-1, 0), (1, 0)]
    return None


def _is_bracket(board: Board, idx: int) -> bool:
    """An attacker or an empty corner closes one end of a shieldwall."""
    piece = board.squares[idx]
    if piece is not None:
        return piece == PieceType.ATTACKER
    return board.classify(idx) == CellClass.CORNER


def shieldwall_captures(board: Board, move: Move) -> dict[int, CaptureMode]:
    """Find defender rows pinned to the board edge by the attacker that just moved.

    盾壁捕獲:
    - 盤端に防御駒（王を含んでよい）が2枚以上連続して並んでいる
    - その列の両端を攻撃駒（または空の隅）が塞いでいて、動いた攻撃駒がその一端
    - 列の各駒の内側（盤中央側）に攻撃駒が接している
    条件を満たすと列の防御駒をすべて取る。王は盾壁では取られない。
    """
    dest = move.destination
    captured: dict[int, CaptureMode] = {}
    if board.squares[dest] != PieceType.ATTACKER:
        return captured
    geometry = _edge_geometry(dest)
    if geometry is None:
        return captured
    (ir, ic), along = geometry

    r0, c0 = square_coords(dest)
    for dr, dc in along:
        run: list[int] = []
        r, c = r0 + dr, c0 + dc
        while on_board(r, c) and board.squares[r * COLS + c] in (
            PieceType.DEFENDER,
            PieceType.KING,
        ):
            run.append(r * COLS + c)
            r += dr
            c += dc
        if len(run) < 2 or not on_board(r, c):
            continue
        if not _is_bracket(board, r * COLS + c):
            continue
        # 列の全駒の内側に攻撃駒が必要
        pinned = True
        for idx in run:
            rr, cc = square_coords(idx)
            if board.squares[(rr + ir) * COLS + (cc + ic)] != PieceType.ATTACKER:
                pinned = False
                break
        if not pinned:
            continue
        for idx in run:
            if board.squares[idx] == PieceType.DEFENDER:
                captured[idx] = CaptureMode.SHIELDWALL
    return captured


def captures_after(board: Board, move: Move, rules: RuleSet = COPENHAGEN) -> CaptureSet:
    """Return every piece captured by move.

    board は move を反映済みであること。すべてのモードを評価して和集合を取る。
    同じマスが複数モードで取られる場合は挟み取りを優先して記録する。
    """
    captured = custodian_captures(board, move)
    if rules.shieldwall:
        for idx, mode in shieldwall_captures(board, move).items():
            captured.setdefault(idx, mode)
    return CaptureSet.from_dict(captured)


def apply_captures(board: Board, capture_set: CaptureSet) -> None:
    """Remove all captured pieces from board in one step."""
    for idx in capture_set.cells:
        board.remove(idx)
    if capture_set:
        logger.debug(
            "Captured %d piece(s): %s",
            len(capture_set),
            [(square_coords(idx), mode.name) for idx, mode in capture_set.entries],
        )


def is_encircled(board: Board) -> bool:
    """True if no defender (king included) can reach the board edge.

    防御側の全駒から、攻撃駒以外のマスを通って盤端に届くかを塗りつぶしで調べる。
    届かなければ包囲完成。防御側の駒が1枚もなければ False。
    """
    defenders = [
        idx
        for idx, piece in enumerate(board.squares)
        if piece in (PieceType.DEFENDER, PieceType.KING)
    ]
    if not defenders:
        return False
    region = flood_fill(defenders, lambda idx: board.squares[idx] != PieceType.ATTACKER)
    return not any(Board.is_edge(idx) for idx in region)
