"""FastAPI web application for playing Copenhagen Hnefatafl against AI.

FastAPI を使ったフネファタフル AI の Web API。
描画はクライアント側の責務で、ここでは局面データと合法手だけを返す。

エンドポイント:
  POST /api/new-game          — 新規対局を開始（ゲームIDを返す）
  POST /api/move              — 人間が手を指す（AIが応答して次局面を返す）
  POST /api/auto-move/{id}    — AI の手番なら AI が1手指す（AI同士の観戦用）
  GET  /api/state/{id}        — 現在の局面情報を取得
  GET  /api/destinations/{id}/{square} — 駒の移動先（ハイライト用）
  POST /api/worker            — ワーカー要求（AI の手・セルフテスト）
  GET  /api/self-test         — ルールの回帰シナリオを実行
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from hnefatafl_ai.engine.random_player import random_move
from hnefatafl_ai.engine.worker import handle_request, self_test
from hnefatafl_ai.game.copenhagen.display import board_to_str, move_to_str, transcript_lines
from hnefatafl_ai.game.copenhagen.errors import IllegalMoveError
from hnefatafl_ai.game.copenhagen.moves import decode_move, encode_move
from hnefatafl_ai.game.copenhagen.state import CopenhagenGame
from hnefatafl_ai.game.copenhagen.types import COLS, ROWS, Move, Side

logger = logging.getLogger(__name__)

HOST = "0.0.0.0"
PORT = 8000

app = FastAPI(title="Hnefatafl AI")

# 対局情報のインメモリストレージ（サーバ再起動で消える簡易実装）
_games: dict[str, dict[str, Any]] = {}


class NewGameRequest(BaseModel):
    """新規対局リクエストのスキーマ。"""

    human_side: Literal["attackers", "defenders", "none"] = "defenders"
    ai_type: str = "random"  # AI種別（現在は "random" のみ）


class MoveRequest(BaseModel):
    """指し手リクエストのスキーマ。"""

    game_id: str  # 対局ID（/api/new-game で取得）
    move: int  # 手のエンコード値（origin * 121 + destination）


def _get_ai_fn(ai_type: str) -> Callable[[CopenhagenGame], Move]:
    """Get the AI move function based on type."""
    if ai_type == "random":
        return lambda game: random_move(game)
    msg = f"Unknown AI type: {ai_type}"
    raise ValueError(msg)


def _state_to_dict(game: CopenhagenGame) -> dict[str, Any]:
    """Convert game state to JSON-serializable dict.

    局面情報を JSON 形式（辞書）に変換する。
    """
    board = game.board
    squares: list[dict[str, Any] | None] = []
    for piece in board.squares:
        if piece is None:
            squares.append(None)
        else:
            squares.append({"type": piece.value, "name": piece.name})
    outcome = game.outcome
    return {
        "current_player": game.current_player,  # 手番（0=攻撃側, 1=防御側）
        "side_to_move": game.side_to_move.name.lower(),
        "is_terminal": game.is_terminal,
        "winner": game.winner,  # 勝者（None=対局中）
        "reason": None if outcome.reason is None else outcome.reason.name.lower(),
        "legal_moves": [encode_move(m) for m in game.legal_moves()],
        "squares": squares,  # 121要素
        "rows": ROWS,
        "cols": COLS,
        "board_display": board_to_str(board),
        "transcript": transcript_lines(game.moves),
    }


def _lookup(game_id: str) -> dict[str, Any]:
    game = _games.get(game_id)
    if game is None:
        raise HTTPException(404, "Game not found")
    return game


def _ai_turn(entry: dict[str, Any]) -> Move | None:
    """Let the AI play if it is the AI's turn; return its move."""
    game: CopenhagenGame = entry["game"]
    if game.is_terminal or game.side_to_move == entry["human_side"]:
        return None
    move = entry["ai_fn"](game)
    game.apply_move(move)
    return move


@app.post("/api/new-game")
async def new_game(req: NewGameRequest) -> dict[str, Any]:
    """新規対局を開始する。

    人間が防御側なら、攻撃側（先手）の AI が最初の1手を指した局面を返す。
    """
    try:
        ai_fn = _get_ai_fn(req.ai_type)
    except ValueError as e:
        raise HTTPException(400, str(e)) from e

    game_id = str(uuid.uuid4())[:8]
    human_side = None if req.human_side == "none" else Side[req.human_side.upper()]
    entry: dict[str, Any] = {
        "game": CopenhagenGame(),
        "human_side": human_side,
        "ai_fn": ai_fn,
        "lock": asyncio.Lock(),  # 人間の手と AI の手が重ならないよう直列化
    }
    _games[game_id] = entry
    logger.info("New game %s (human: %s, ai: %s)", game_id, req.human_side, req.ai_type)

    ai_move = None
    if human_side is not None:
        async with entry["lock"]:
            ai_move = _ai_turn(entry)
    return {
        "game_id": game_id,
        "state": _state_to_dict(entry["game"]),
        "ai_move": None if ai_move is None else encode_move(ai_move),
    }


@app.post("/api/move")
async def make_move(req: MoveRequest) -> dict[str, Any]:
    """人間の手を受け取り、AIが応答して次の局面を返す。"""
    entry = _lookup(req.game_id)
    async with entry["lock"]:
        game: CopenhagenGame = entry["game"]
        if game.is_terminal:
            raise HTTPException(400, "Game is already over")
        if game.side_to_move != entry["human_side"]:
            raise HTTPException(400, "Not your turn")
        try:
            move = decode_move(req.move)
            game.apply_move(move)
        except (ValueError, IllegalMoveError) as e:
            raise HTTPException(400, f"Illegal move: {e}") from e

        ai_move = _ai_turn(entry)
        return {
            "state": _state_to_dict(game),
            "player_move": req.move,
            "ai_move": None if ai_move is None else encode_move(ai_move),
            "ai_move_decoded": None if ai_move is None else move_to_str(ai_move),
        }


@app.post("/api/auto-move/{game_id}")
async def auto_move(game_id: str) -> dict[str, Any]:
    """自動対戦: 現在の手番が AI なら1手指す。"""
    entry = _lookup(game_id)
    async with entry["lock"]:
        game: CopenhagenGame = entry["game"]
        if game.is_terminal:
            raise HTTPException(400, "Game is already over")
        moved_by = game.side_to_move
        move = _ai_turn(entry)
        if move is None:
            raise HTTPException(400, "Current player is human — use /api/move instead")
        return {
            "state": _state_to_dict(game),
            "move": encode_move(move),
            "move_decoded": move_to_str(move),
            "moved_by": moved_by.value,
        }


@app.get("/api/state/{game_id}")
async def get_state(game_id: str) -> dict[str, Any]:
    """現在の局面情報を取得する。"""
    return _state_to_dict(_lookup(game_id)["game"])


@app.get("/api/destinations/{game_id}/{square}")
async def get_destinations(game_id: str, square: int) -> dict[str, Any]:
    """指定マスの駒の移動先を返す（手番側の駒でなければ空）。"""
    game: CopenhagenGame = _lookup(game_id)["game"]
    if not 0 <= square < ROWS * COLS:
        raise HTTPException(400, f"Square out of range: {square}")
    return {"square": square, "destinations": game.legal_destinations(square)}


@app.post("/api/worker")
async def worker(message: dict[str, Any]) -> dict[str, Any]:
    """ワーカー要求を処理する（要求・応答の形式は engine.worker を参照）。"""
    return handle_request(message)


@app.get("/api/self-test")
async def run_self_test() -> dict[str, Any]:
    """ルールの回帰シナリオを実行して結果を返す。"""
    return self_test().model_dump()


def main() -> None:
    """Run the web server.

    `hnefatafl-web` または `python -m hnefatafl_ai.web.app` で起動する。
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    report = self_test()
    if not report.ok:
        logger.warning("Self-test failed at startup: %s", report.failures or report.error)
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
