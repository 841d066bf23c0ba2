"""CLI entry point for hnefatafl-ai — Human vs Random AI.

コマンドラインで動くコペンハーゲン・フネファタフル対局プログラム。
プレイヤー対ランダムAIで対局できる（陣営は --side で選ぶ）。

起動方法: `hnefatafl-cli` または `hnefatafl-cli --side attackers --seed 1`
"""

from __future__ import annotations

import argparse
import logging
import random

from hnefatafl_ai.engine.random_player import random_move
from hnefatafl_ai.engine.worker import self_test
from hnefatafl_ai.game.copenhagen.display import (
    SIDE_NAMES,
    board_to_str,
    move_to_str,
    parse_move,
)
from hnefatafl_ai.game.copenhagen.errors import IllegalMoveError
from hnefatafl_ai.game.copenhagen.state import CopenhagenGame
from hnefatafl_ai.game.copenhagen.types import Move, Side

logger = logging.getLogger(__name__)


def _read_move(moves: list[Move]) -> Move | None:
    """Prompt until the player gives a listed number or a move like "d1-d4".

    None を返したら対局中断。
    """
    while True:
        try:
            choice = input("Your move (number or d1-d4): ").strip()
        except (EOFError, KeyboardInterrupt):
            return None
        if choice.isdigit():
            idx = int(choice)
            if 0 <= idx < len(moves):
                return moves[idx]
            print(f"Invalid: choose 0-{len(moves) - 1}")
            continue
        try:
            return parse_move(choice)
        except ValueError as e:
            print(e)


def play(human: Side, rng: random.Random) -> None:
    """Run one game, human against the random AI.

    ゲームの流れ:
    1. 盤面を表示
    2. 人間の手番なら合法手一覧を表示して入力を求める
    3. AI の手番ならランダムに指す
    4. 終局まで繰り返す
    """
    print("=== Copenhagen Hnefatafl ===")
    print(f"You are {SIDE_NAMES[human]}. Attackers move first.")
    print()

    game = CopenhagenGame()

    while not game.is_terminal:
        print(board_to_str(game.board))
        print()

        if game.side_to_move == human:
            moves = game.legal_moves()
            print("Legal moves:")
            for i, m in enumerate(moves):
                print(f"  {i}: {move_to_str(m)}")
            print()

            # 合法な手が入力されるまで繰り返す
            while True:
                move = _read_move(moves)
                if move is None:
                    print("\nGame aborted.")
                    return
                try:
                    record = game.apply_move(move)
                    break
                except IllegalMoveError as e:
                    print(f"Illegal: {e}")
            print(f"You play: {move_to_str(record.move, record.captures.cells)}")
        else:
            record = game.apply_move(random_move(game, rng))
            print(f"AI plays: {move_to_str(record.move, record.captures.cells)}")

        print()

    # 終局: 結果を表示
    print(board_to_str(game.board))
    print()
    print(f"Result: {game.outcome.describe()}")
    if game.outcome.winner == human:
        print("You win!")
    else:
        print("AI wins!")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Copenhagen Hnefatafl against a random AI.")
    parser.add_argument(
        "--side",
        choices=["attackers", "defenders"],
        default="defenders",
        help="side you play (default: defenders)",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for the AI")
    parser.add_argument(
        "--self-test", action="store_true", help="run the rule scenarios and exit"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.self_test:
        report = self_test()
        print(f"{report.count} scenarios, ok={report.ok}")
        for failure in report.failures:
            print(f"  FAIL {failure}")
        if report.error:
            print(f"  ERROR {report.error}")
        raise SystemExit(0 if report.ok else 1)

    play(Side[args.side.upper()], random.Random(args.seed))


if __name__ == "__main__":
    main()
