"""Game state machine for Copenhagen Hnefatafl.

コペンハーゲン・フネファタフルの対局進行。
Board が盤面データを持ち、CopenhagenGame が手番・履歴・勝敗を管理する。

apply_move() の流れ:
1. 合法性の検証（不正なら IllegalMoveError、盤面は変更しない）
2. 盤面のコピー上で駒を動かす
3. 捕獲を判定して取り除く
4. 新しい局面を履歴に追加
5. 勝敗判定。終局なら結果を確定、そうでなければ手番交代
すべて成功してから状態を差し替えるので、途中で失敗しても部分的な変更は残らない。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import torch

from hnefatafl_ai.game.copenhagen.board import Board
from hnefatafl_ai.game.copenhagen.captures import CaptureSet, apply_captures, captures_after
from hnefatafl_ai.game.copenhagen.config import COPENHAGEN, RuleSet
from hnefatafl_ai.game.copenhagen.errors import IllegalMoveError
from hnefatafl_ai.game.copenhagen.moves import ACTION_SPACE, is_legal
from hnefatafl_ai.game.copenhagen.moves import legal_destinations as _legal_destinations
from hnefatafl_ai.game.copenhagen.moves import legal_moves as _legal_moves
from hnefatafl_ai.game.copenhagen.outcome import (
    IN_PROGRESS,
    GameHistory,
    GameOutcome,
    outcome_after,
    position_key,
)
from hnefatafl_ai.game.copenhagen.types import (
    COLS,
    NUM_SQUARES,
    ROWS,
    CellClass,
    Move,
    PieceType,
    Side,
    square_coords,
)

logger = logging.getLogger(__name__)

# to_tensor_planes() のチャンネル数
NUM_PLANES = 5


@dataclass(frozen=True)
class MoveRecord:
    """One applied move, kept for transcript display.

    ply は 1 始まりの手数。
    """

    ply: int
    side: Side
    move: Move
    captures: CaptureSet


class CopenhagenGame:
    """Mutable game of Copenhagen Hnefatafl.

    GameState プロトコルを実装する。
    同じインスタンスに対する apply_move() の同時呼び出しはできない（呼び出し側で直列化すること）。
    """

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Side = Side.ATTACKERS,
        rules: RuleSet = COPENHAGEN,
    ) -> None:
        self.rules = rules
        if board is None:
            board = Board(restricted=rules.restricted_squares)
        else:
            board = board.copy()
        board.king_position()  # 王がちょうど1枚あることを確認
        self._board = board
        self._side = side_to_move
        self._history = GameHistory([position_key(board, side_to_move)])
        self._moves: list[MoveRecord] = []
        self._outcome: GameOutcome = IN_PROGRESS

    @classmethod
    def from_snapshot(
        cls,
        rows: Sequence[str],
        side_to_move: Side | str,
        rules: RuleSet = COPENHAGEN,
    ) -> CopenhagenGame:
        """Build a game from serialized rows and the side to move.

        side_to_move は Side か "attackers" / "defenders"。
        """
        if isinstance(side_to_move, str):
            try:
                side_to_move = Side[side_to_move.upper()]
            except KeyError:
                msg = f"Unknown side: {side_to_move!r}"
                raise ValueError(msg) from None
        board = Board.from_rows(rows, restricted=rules.restricted_squares)
        return cls(board=board, side_to_move=side_to_move, rules=rules)

    def snapshot(self) -> dict[str, object]:
        """Serializable {rows, side_to_move} (inverse of from_snapshot)."""
        return {
            "rows": self._board.to_rows(),
            "side_to_move": self._side.name.lower(),
        }

    def copy(self) -> CopenhagenGame:
        """Independent copy (board, history, transcript and outcome)."""
        game = CopenhagenGame.__new__(CopenhagenGame)
        game.rules = self.rules
        game._board = self._board.copy()
        game._side = self._side
        game._history = self._history.copy()
        game._moves = list(self._moves)
        game._outcome = self._outcome
        return game

    # --- GameState プロトコル ---

    @property
    def action_space_size(self) -> int:
        """行動空間のサイズ（121 × 121 = 14641）。"""
        return ACTION_SPACE

    @property
    def current_player(self) -> int:
        """現在の手番（0=攻撃側, 1=防御側）。"""
        return self._side.value

    @property
    def is_terminal(self) -> bool:
        return self._outcome.is_terminal

    @property
    def winner(self) -> int | None:
        """勝者（0 or 1）。対局中は None。"""
        return None if self._outcome.winner is None else self._outcome.winner.value

    def legal_moves(self) -> list[Move]:
        """手番側の合法手。終局後は空リスト。"""
        if self.is_terminal:
            return []
        return _legal_moves(self._board, self._side)

    def apply_move(self, move: Move | tuple[int, int]) -> MoveRecord:
        """Apply a move for the side to move.

        手番側の手を適用する。不正な手・終局後の手は IllegalMoveError。
        """
        if self.is_terminal:
            raise IllegalMoveError(f"Game is already over: {self._outcome.describe()}")
        try:
            move = Move(*move)
        except TypeError:
            raise IllegalMoveError(f"Malformed move: {move!r}") from None
        if not all(isinstance(x, int) and not isinstance(x, bool) for x in move):
            raise IllegalMoveError(f"Malformed move: {move!r}")
        origin, dest = move
        if not (0 <= origin < NUM_SQUARES and 0 <= dest < NUM_SQUARES):
            raise IllegalMoveError(f"Move out of board: {move}")
        piece = self._board.occupant(origin)
        if piece is None:
            raise IllegalMoveError(f"No piece at {square_coords(origin)}")
        if piece.side != self._side:
            raise IllegalMoveError(
                f"Piece at {square_coords(origin)} belongs to {piece.side.name.lower()}"
            )
        if not is_legal(self._board, self._side, move):
            raise IllegalMoveError(
                f"Illegal move {square_coords(origin)} -> {square_coords(dest)}"
            )

        # コピー上で処理し、最後にまとめて差し替える
        board = self._board.copy()
        board.remove(origin)
        board.place(dest, piece)
        captures = captures_after(board, move, self.rules)
        apply_captures(board, captures)

        next_side = self._side.opponent
        # 履歴には直接追加し、勝敗判定が失敗したら取り消す
        self._history.append(position_key(board, next_side))
        try:
            outcome = outcome_after(board, self._history, self._side, self.rules)
        except Exception:
            self._history.pop()
            raise

        record = MoveRecord(len(self._moves) + 1, self._side, move, captures)
        self._board = board
        self._moves.append(record)
        if outcome.is_terminal:
            self._outcome = outcome
            logger.info("Game over after %d plies: %s", record.ply, outcome.describe())
        else:
            self._side = next_side
        return record

    def to_tensor_planes(self) -> torch.Tensor:
        """Convert to tensor planes for neural network input.

        局面をニューラルネットワーク入力用テンソルに変換する。

        Planes（チャンネル）の構成（合計5チャンネル）:
        ch.0: 攻撃駒
        ch.1: 防御駒
        ch.2: 王
        ch.3: 王だけが止まれるマス（隅・玉座・制限マス）
        ch.4: 手番インジケータ（攻撃側の手番なら全1、防御側なら全0）
        """
        planes = torch.zeros(NUM_PLANES, ROWS, COLS)
        for idx, piece in enumerate(self._board.squares):
            r, c = idx // COLS, idx % COLS
            if piece is not None:
                planes[piece.value, r, c] = 1.0
            if self._board.classify(idx) != CellClass.NORMAL:
                planes[3, r, c] = 1.0
        if self._side == Side.ATTACKERS:
            planes[4, :, :] = 1.0
        return planes

    # --- 盤面・履歴の参照（UI・ワーカー向け） ---

    @property
    def board(self) -> Board:
        """A copy of the current board (the game keeps its own)."""
        return self._board.copy()

    @property
    def side_to_move(self) -> Side:
        return self._side

    @property
    def outcome(self) -> GameOutcome:
        return self._outcome

    @property
    def moves(self) -> list[MoveRecord]:
        """Applied moves in order (transcript)."""
        return list(self._moves)

    @property
    def history(self) -> GameHistory:
        return self._history.copy()

    def repetition_count(self) -> int:
        """How many times the current position has occurred."""
        return self._history.count(position_key(self._board, self._side))

    def legal_destinations(self, origin: int) -> list[int]:
        """Destinations for the piece on origin, if it belongs to the side to move.

        ハイライト表示用。相手の駒・空マス・終局後は空リスト。
        """
        piece = self._board.occupant(origin)
        if self.is_terminal or piece is None or piece.side != self._side:
            return []
        return _legal_destinations(self._board, origin)

    def piece_count(self, piece_type: PieceType) -> int:
        return self._board.count(piece_type)
