"""Random player — selects a legal move uniformly at random.

ランダムプレイヤー: 合法手の中からランダムに手を選ぶ。

用途:
- 実装の動作確認（ルールが正しく実装されているかテスト）
- ワーカー経由の AI 対局の相手
"""

from __future__ import annotations

import random

from hnefatafl_ai.game.copenhagen.types import Move
from hnefatafl_ai.game.protocol import GameState


def random_move(state: GameState, rng: random.Random | None = None) -> Move:
    """Return a random legal move.

    合法手の中から一様ランダムで1手を返す。呼び出し間で状態は持たない。
    合法手がない場合は ValueError を送出する（終局局面では呼ばれないはず）。
    rng を渡すと再現可能な選択になる（テスト用）。
    """
    moves = state.legal_moves()
    if not moves:
        raise ValueError("No legal moves available")
    return (rng or random).choice(list(moves))  # 一様ランダムサンプリング
