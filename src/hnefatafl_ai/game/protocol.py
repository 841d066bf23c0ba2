"""GameState protocol shared by players and transports.

ゲーム状態の共通インタフェース（プロトコル）。

ランダムプレイヤー・ワーカー・Web API はこのプロトコルだけに依存する。
これを「ポリモーフィズム」または「ダックタイピング」と呼ぶ。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import torch

from hnefatafl_ai.game.copenhagen.types import Move


@runtime_checkable  # isinstance() でのランタイムチェックを有効にする
class GameState(Protocol):
    """Common interface for playable game states.

    注意: apply_move() は状態を直接変更する（盤面はゲームが専有する）。
    探索などで分岐が必要な場合は copy() してから適用すること。
    """

    @property
    def current_player(self) -> int:
        """現在手番の側（0=攻撃側, 1=防御側）を返す。"""
        ...

    @property
    def is_terminal(self) -> bool:
        """ゲームが終了していれば True を返す。"""
        ...

    @property
    def winner(self) -> int | None:
        """勝者（0 or 1）を返す。対局中は None。"""
        ...

    def legal_moves(self) -> Sequence[Move]:
        """合法手のリストを返す。"""
        ...

    def apply_move(self, move: Move) -> object:
        """手番側の手を適用する。"""
        ...

    def copy(self) -> GameState:
        """独立したコピーを返す。"""
        ...

    @property
    def action_space_size(self) -> int:
        """行動空間のサイズ（可能な手の総数）を返す。"""
        ...

    def to_tensor_planes(self) -> torch.Tensor:
        """局面をニューラルネットワーク入力用テンソルに変換する。"""
        ...
