"""Rule configuration for Copenhagen Hnefatafl.

ルールの設定定義。コミュニティによって細部が異なるルール（盾壁・出口砦など）を
設定クラスで切り替えられるようにする。
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RuleSet:
    """Switchable rule details.

    Attributes:
        restricted_squares: 王だけが止まれる隅以外のマス（標準ルールでは空）
        shieldwall:         盾壁捕獲を有効にする
        exit_forts:         出口砦による防御側の勝利を有効にする
        encirclement:       包囲による攻撃側の勝利を有効にする
        repetition_limit:   防御側手番で同一局面が何回目に現れたら負けか
    """

    restricted_squares: frozenset[int] = frozenset()
    shieldwall: bool = True
    exit_forts: bool = True
    encirclement: bool = True
    repetition_limit: int = 3


# 標準のコペンハーゲン・ルール
COPENHAGEN = RuleSet()
