"""Win condition evaluation for Copenhagen Hnefatafl.

勝敗判定。捕獲を反映した後の盤面・局面履歴・直前に指した側から、
対局が終わったかどうかとその理由を求める。

判定順序（最初に当てはまったものが結果になる）:
1. 王がいない → 攻撃側の勝ち（王の捕獲）
2. 王が隅にいる、または出口砦が完成 → 防御側の勝ち（王の脱出）
3. 包囲完成 → 攻撃側の勝ち（王の捕獲と同等）
4. 次の手番側に合法手がない → 次の手番側の負け
5. 防御側の手番で同一局面が3回目 → 攻撃側の勝ち（千日手は防御側の負け）
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from hnefatafl_ai.game.copenhagen.board import Board
from hnefatafl_ai.game.copenhagen.captures import flood_fill, is_encircled
from hnefatafl_ai.game.copenhagen.config import COPENHAGEN, RuleSet
from hnefatafl_ai.game.copenhagen.moves import has_legal_move
from hnefatafl_ai.game.copenhagen.types import (
    COLS,
    CellClass,
    OutcomeReason,
    PieceType,
    Side,
    neighbors,
    on_board,
    square_coords,
)

PositionKey = tuple[tuple[PieceType | None, ...], Side]


@dataclass(frozen=True)
class GameOutcome:
    """Result of a game: winner and reason, both None while in progress."""

    winner: Side | None = None
    reason: OutcomeReason | None = None

    @property
    def is_terminal(self) -> bool:
        return self.winner is not None

    def describe(self) -> str:
        if self.winner is None:
            return "in progress"
        assert self.reason is not None
        return f"{self.winner.name.lower()} win ({self.reason.name.lower()})"


IN_PROGRESS = GameOutcome()


def position_key(board: Board, side_to_move: Side) -> PositionKey:
    """Hashable key of (occupancy, side to move)."""
    return board.key(), side_to_move


class GameHistory:
    """Ordered position keys with occurrence counts.

    局面キーを順番に記録する。千日手判定のため出現回数も数えておく。
    最後の要素が常に現在の局面。
    """

    def __init__(self, keys: Iterable[PositionKey] = ()) -> None:
        self._keys: list[PositionKey] = []
        self._counts: Counter[PositionKey] = Counter()
        for key in keys:
            self.append(key)

    def append(self, key: PositionKey) -> None:
        self._keys.append(key)
        self._counts[key] += 1

    def pop(self) -> PositionKey:
        """Remove and return the last key."""
        key = self._keys.pop()
        self._counts[key] -= 1
        if not self._counts[key]:
            del self._counts[key]
        return key

    def count(self, key: PositionKey) -> int:
        """How many times key has occurred so far."""
        return self._counts[key]

    @property
    def last(self) -> PositionKey | None:
        return self._keys[-1] if self._keys else None

    def copy(self) -> GameHistory:
        history = GameHistory()
        history._keys = list(self._keys)
        history._counts = self._counts.copy()
        return history

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[PositionKey]:
        return iter(self._keys)


def is_exit_fort(board: Board) -> bool:
    """Check whether the king sits in an unbreakable fort on the board edge.

    出口砦の判定:
    1. 王が盤端にいる
    2. 王から空マスを辿って届く領域（砦の内部）があり、王が動ける
    3. 内部を囲むマスはすべて防御駒（攻撃駒が接していれば砦ではない）
    4. 囲いの防御駒はどれも挟み取りされ得ない
       （縦・横それぞれで、両側とも攻撃駒が入れる/敵対するマスなら取られ得る）
    """
    king = board.king_position_or_none()
    if king is None or not Board.is_edge(king):
        return False

    interior = flood_fill([king], lambda idx: board.squares[idx] is None)
    if len(interior) < 2:
        return False  # 王が動けない

    wall: set[int] = set()
    for idx in interior:
        for nidx, _, _ in neighbors(idx):
            if nidx in interior:
                continue
            if board.squares[nidx] != PieceType.DEFENDER:
                return False
            wall.add(nidx)

    def exposed(row: int, col: int) -> bool:
        # 盤外・囲いの駒・内部の通常マスは攻撃側が使えない
        if not on_board(row, col):
            return False
        idx = row * COLS + col
        if idx in wall:
            return False
        if idx in interior:
            return board.squares[idx] is None and board.classify(idx) != CellClass.NORMAL
        return True

    for idx in wall:
        r, c = square_coords(idx)
        for dr, dc in ((1, 0), (0, 1)):
            if exposed(r + dr, c + dc) and exposed(r - dr, c - dc):
                return False
    return True


def outcome_after(
    board: Board,
    history: GameHistory,
    side_just_moved: Side,
    rules: RuleSet = COPENHAGEN,
) -> GameOutcome:
    """Decide whether the game ended with the move side_just_moved just made.

    board は捕獲を反映済み、history は現在の局面を追加済みであること。
    """
    king = board.king_position_or_none()
    if king is None:
        return GameOutcome(Side.ATTACKERS, OutcomeReason.KING_CAPTURED)

    if board.classify(king) == CellClass.CORNER:
        return GameOutcome(Side.DEFENDERS, OutcomeReason.KING_ESCAPED)
    if rules.exit_forts and is_exit_fort(board):
        return GameOutcome(Side.DEFENDERS, OutcomeReason.KING_ESCAPED)

    if rules.encirclement and is_encircled(board):
        return GameOutcome(Side.ATTACKERS, OutcomeReason.KING_CAPTURED)

    to_move = side_just_moved.opponent
    if not has_legal_move(board, to_move):
        # 動けない側の負け
        return GameOutcome(side_just_moved, OutcomeReason.OPPONENT_NO_LEGAL_MOVES)

    if (
        to_move == Side.DEFENDERS
        and history.count(position_key(board, to_move)) >= rules.repetition_limit
    ):
        return GameOutcome(Side.ATTACKERS, OutcomeReason.DEFENDER_REPETITION)

    return IN_PROGRESS
