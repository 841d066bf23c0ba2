"""Copenhagen Hnefatafl (11x11) rules engine."""

from hnefatafl_ai.game.copenhagen.board import Board
from hnefatafl_ai.game.copenhagen.captures import CaptureSet, captures_after
from hnefatafl_ai.game.copenhagen.config import COPENHAGEN, RuleSet
from hnefatafl_ai.game.copenhagen.display import board_to_str
from hnefatafl_ai.game.copenhagen.errors import IllegalMoveError, InvariantViolation
from hnefatafl_ai.game.copenhagen.moves import legal_moves
from hnefatafl_ai.game.copenhagen.outcome import GameOutcome, outcome_after
from hnefatafl_ai.game.copenhagen.state import CopenhagenGame, MoveRecord
from hnefatafl_ai.game.copenhagen.types import (
    COLS,
    ROWS,
    CaptureMode,
    CellClass,
    Move,
    OutcomeReason,
    PieceType,
    Side,
)

__all__ = [
    "COLS",
    "COPENHAGEN",
    "Board",
    "CaptureMode",
    "CaptureSet",
    "CellClass",
    "CopenhagenGame",
    "GameOutcome",
    "IllegalMoveError",
    "InvariantViolation",
    "Move",
    "MoveRecord",
    "OutcomeReason",
    "PieceType",
    "ROWS",
    "RuleSet",
    "Side",
    "board_to_str",
    "captures_after",
    "legal_moves",
    "outcome_after",
]
