"""Worker contract for AI move selection and self-test.

AI ワーカーの要求/応答。同期的な関数 handle_request() として定義し、
非同期の転送路（HTTP など）は外側に置く。

要求:
  {"kind": "move", "rows": [...11行], "side_to_move": "attackers" | "defenders"}
  {"kind": "self_test"}
応答:
  {"kind": "move", "move": {"origin": [r, c], "destination": [r, c], "action": n, "notation": "d1-d4"}}
  {"kind": "self_test", "ok": bool, "failures": [...], "count": n, "error": null}
  {"kind": "error", "error": "..."}
"""

from __future__ import annotations

import logging
import random
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from hnefatafl_ai.engine.random_player import random_move
from hnefatafl_ai.game.copenhagen.display import move_to_str
from hnefatafl_ai.game.copenhagen.moves import encode_move
from hnefatafl_ai.game.copenhagen.scenarios import run_scenarios
from hnefatafl_ai.game.copenhagen.state import CopenhagenGame
from hnefatafl_ai.game.copenhagen.types import ROWS, Move, square_coords

logger = logging.getLogger(__name__)


class MoveRequest(BaseModel):
    """局面のスナップショットから AI の手を求める要求。"""

    kind: Literal["move"] = "move"
    rows: list[str]
    side_to_move: Literal["attackers", "defenders"]

    @field_validator("rows")
    @classmethod
    def _one_king(cls, rows: list[str]) -> list[str]:
        # 王がちょうど1枚でない局面は入力エラーとして扱う
        if len(rows) != ROWS:
            msg = f"expected {ROWS} rows, got {len(rows)}"
            raise ValueError(msg)
        kings = sum(row.count("K") for row in rows)
        if kings != 1:
            msg = f"expected exactly one king, found {kings}"
            raise ValueError(msg)
        return rows


class SelfTestRequest(BaseModel):
    """起動時の動作確認要求。"""

    kind: Literal["self_test"] = "self_test"


WorkerRequest = Annotated[MoveRequest | SelfTestRequest, Field(discriminator="kind")]
_REQUEST_ADAPTER: TypeAdapter[MoveRequest | SelfTestRequest] = TypeAdapter(WorkerRequest)


class MovePayload(BaseModel):
    origin: tuple[int, int]
    destination: tuple[int, int]
    action: int
    notation: str

    @classmethod
    def from_move(cls, move: Move) -> MovePayload:
        return cls(
            origin=square_coords(move.origin),
            destination=square_coords(move.destination),
            action=encode_move(move),
            notation=move_to_str(move),
        )


class MoveReply(BaseModel):
    kind: Literal["move"] = "move"
    move: MovePayload


class SelfTestReply(BaseModel):
    kind: Literal["self_test"] = "self_test"
    ok: bool
    failures: list[str] = Field(default_factory=list)
    count: int = 0
    error: str | None = None


class ErrorReply(BaseModel):
    kind: Literal["error"] = "error"
    error: str


def self_test() -> SelfTestReply:
    """Run the rule scenarios; never raises.

    シナリオ実行中の想定外の例外は error フィールドで返す（ワーカー境界を越えて投げない）。
    """
    try:
        report = run_scenarios()
    except Exception as e:  # noqa: BLE001
        logger.error("Self-test crashed: %s", e, exc_info=True)
        return SelfTestReply(ok=False, error=f"{type(e).__name__}: {e}")
    return SelfTestReply(ok=report.ok, failures=report.failures, count=report.count)


def choose_move(request: MoveRequest, rng: random.Random | None = None) -> MoveReply | ErrorReply:
    """Pick a random legal move for the snapshot in request."""
    try:
        game = CopenhagenGame.from_snapshot(request.rows, request.side_to_move)
    except ValueError as e:
        return ErrorReply(error=str(e))
    if not game.legal_moves():
        return ErrorReply(error=f"No legal moves for {request.side_to_move}")
    move = random_move(game, rng)
    return MoveReply(move=MovePayload.from_move(move))


def handle_request(message: dict[str, Any], rng: random.Random | None = None) -> dict[str, Any]:
    """Answer one worker message.

    1つの要求に応答する。不正な要求は {"kind": "error"} を返す。
    """
    try:
        request = _REQUEST_ADAPTER.validate_python(message)
    except ValidationError as e:
        return ErrorReply(error=str(e)).model_dump()
    if isinstance(request, SelfTestRequest):
        return self_test().model_dump()
    return choose_move(request, rng).model_dump()
