"""Exceptions raised by the Copenhagen rules engine."""

from __future__ import annotations


class IllegalMoveError(ValueError):
    """The move is not legal here, or the game is already over.

    呼び出し側に通知するだけで、自動修正はしない。盤面は変更されない。
    """


class InvariantViolation(RuntimeError):
    """The board is in a state the rules can never produce.

    王が0枚または複数枚見つかった場合など。捕獲・盤面操作のバグを示すため、
    握りつぶさずに伝播させること。
    """
