"""Named rule scenarios for regression runs and the worker self-test.

ルールの回帰シナリオ集。各シナリオは名前と引数なしの判定関数を持ち、
成功なら True を返す。run_scenarios() がすべて実行して結果をまとめる。

盤面は棋譜表記（列 a〜k、行 1〜11 を上から数える）で駒を置いて作る。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from hnefatafl_ai.game.copenhagen.board import Board
from hnefatafl_ai.game.copenhagen.config import COPENHAGEN, RuleSet
from hnefatafl_ai.game.copenhagen.display import parse_move, parse_square
from hnefatafl_ai.game.copenhagen.errors import IllegalMoveError
from hnefatafl_ai.game.copenhagen.moves import legal_moves
from hnefatafl_ai.game.copenhagen.state import CopenhagenGame, MoveRecord
from hnefatafl_ai.game.copenhagen.types import (
    INITIAL_ATTACKERS,
    INITIAL_DEFENDERS,
    THRONE,
    CaptureMode,
    CellClass,
    OutcomeReason,
    PieceType,
    Side,
)

logger = logging.getLogger(__name__)

_PIECES: dict[str, PieceType] = {
    "A": PieceType.ATTACKER,
    "D": PieceType.DEFENDER,
    "K": PieceType.KING,
}


@dataclass(frozen=True)
class Scenario:
    """A named zero-argument check."""

    name: str
    run: Callable[[], bool]


@dataclass(frozen=True)
class ScenarioReport:
    """Result of running scenarios: ok only if nothing failed."""

    ok: bool
    failures: list[str] = field(default_factory=list)
    count: int = 0

    def to_dict(self) -> dict[str, object]:
        return {"ok": self.ok, "failures": list(self.failures), "count": self.count}


def setup_game(
    pieces: Mapping[str, str],
    side: Side = Side.ATTACKERS,
    rules: RuleSet = COPENHAGEN,
) -> CopenhagenGame:
    """Build a game from {"f6": "K", "f5": "A", ...} on an empty board."""
    board = Board.empty(rules.restricted_squares)
    for name, ch in pieces.items():
        board.place(parse_square(name), _PIECES[ch])
    return CopenhagenGame(board=board, side_to_move=side, rules=rules)


def play(game: CopenhagenGame, *moves: str) -> MoveRecord:
    """Apply moves given in notation and return the last record."""
    record = None
    for text in moves:
        record = game.apply_move(parse_move(text))
    assert record is not None, "play() needs at least one move"
    return record


# ---------------------------------------------------------------------------
# 盤面と合法手
# ---------------------------------------------------------------------------


def _initial_counts() -> bool:
    game = CopenhagenGame()
    return (
        game.piece_count(PieceType.ATTACKER) == INITIAL_ATTACKERS
        and game.piece_count(PieceType.DEFENDER) == INITIAL_DEFENDERS
        and game.piece_count(PieceType.KING) == 1
        and game.board.king_position() == THRONE
        and game.side_to_move == Side.ATTACKERS
    )


def _no_king_only_landing() -> bool:
    # 隅の隣の攻撃駒、玉座の隣の防御駒
    game = setup_game({"b1": "A", "a2": "A", "f5": "D", "h8": "K"})
    board = game.board
    for side in Side:
        for move in legal_moves(board, side):
            piece = board.occupant(move.origin)
            if piece != PieceType.KING and board.classify(move.destination) != CellClass.NORMAL:
                return False
    return True


def _pass_through_empty_throne() -> bool:
    game = setup_game({"f2": "A", "h8": "K"})
    dests = game.legal_destinations(parse_square("f2"))
    return parse_square("f9") in dests and THRONE not in dests


def _king_may_land_on_throne() -> bool:
    game = setup_game({"f3": "K", "a10": "A"}, side=Side.DEFENDERS)
    return THRONE in game.legal_destinations(parse_square("f3"))


# ---------------------------------------------------------------------------
# 挟み取り
# ---------------------------------------------------------------------------


def _custodian_between_attackers() -> bool:
    game = setup_game({"e3": "D", "d3": "A", "f9": "A", "h8": "K"})
    record = play(game, "f9-f3")
    return record.captures.by_mode(CaptureMode.CUSTODIAN) == {parse_square("e3")}


def _custodian_against_corner() -> bool:
    game = setup_game({"b1": "D", "c5": "A", "h8": "K"})
    record = play(game, "c5-c1")
    return parse_square("b1") in record.captures


def _custodian_against_empty_throne() -> bool:
    game = setup_game({"f5": "D", "a4": "A", "h8": "K"})
    record = play(game, "a4-f4")
    return parse_square("f5") in record.captures


def _occupied_throne_protects_defender() -> bool:
    game = setup_game({"f5": "D", "a4": "A", "f6": "K"})
    record = play(game, "a4-f4")
    return len(record.captures) == 0


def _king_is_armed() -> bool:
    game = setup_game({"f5": "A", "a4": "D", "f6": "K", "k10": "A"}, side=Side.DEFENDERS)
    record = play(game, "a4-f4")
    return parse_square("f5") in record.captures


def _moving_into_sandwich_is_safe() -> bool:
    game = setup_game({"d3": "A", "f3": "A", "e9": "D", "h8": "K"}, side=Side.DEFENDERS)
    record = play(game, "e9-e3")
    return len(record.captures) == 0 and game.board.occupant(parse_square("e3")) == PieceType.DEFENDER


# ---------------------------------------------------------------------------
# 王の捕獲
# ---------------------------------------------------------------------------


def _king_on_throne_needs_four() -> bool:
    three = setup_game({"f6": "K", "f5": "A", "f7": "A", "e6": "A", "b2": "A"})
    play(three, "b2-b3")
    four = setup_game({"f6": "K", "f5": "A", "f7": "A", "e6": "A", "g9": "A"})
    record = play(four, "g9-g6")
    return (
        not three.is_terminal
        and THRONE in record.captures
        and four.outcome.winner == Side.ATTACKERS
        and four.outcome.reason == OutcomeReason.KING_CAPTURED
    )


def _king_beside_throne_needs_three() -> bool:
    two = setup_game({"f5": "K", "e5": "A", "g9": "A"})
    play(two, "g9-g5")
    three = setup_game({"f5": "K", "e5": "A", "f4": "A", "g9": "A"})
    play(three, "g9-g5")
    return not two.is_terminal and three.outcome.reason == OutcomeReason.KING_CAPTURED


def _king_elsewhere_needs_two() -> bool:
    game = setup_game({"c3": "K", "b3": "A", "d9": "A"})
    play(game, "d9-d3")
    return game.outcome.reason == OutcomeReason.KING_CAPTURED


# ---------------------------------------------------------------------------
# 盾壁
# ---------------------------------------------------------------------------


def _shieldwall_against_attacker() -> bool:
    game = setup_game({
        "d11": "D", "e11": "D", "f11": "D",
        "d10": "A", "e10": "A", "f10": "A",
        "c11": "A", "g7": "A", "h5": "K",
    })
    record = play(game, "g7-g11")
    expected = {parse_square(name) for name in ("d11", "e11", "f11")}
    return record.captures.by_mode(CaptureMode.SHIELDWALL) == expected


def _shieldwall_against_corner() -> bool:
    game = setup_game({
        "b1": "D", "c1": "D",
        "b2": "A", "c2": "A",
        "d5": "A", "h8": "K",
    })
    record = play(game, "d5-d1")
    return record.captures.cells == {parse_square("b1"), parse_square("c1")}


def _shieldwall_spares_king() -> bool:
    game = setup_game({
        "d11": "D", "e11": "K", "f11": "D",
        "d10": "A", "e10": "A", "f10": "A",
        "c11": "A", "g7": "A",
    })
    record = play(game, "g7-g11")
    return (
        record.captures.cells == {parse_square("d11"), parse_square("f11")}
        and game.board.occupant(parse_square("e11")) == PieceType.KING
    )


def _shieldwall_needs_every_front() -> bool:
    game = setup_game({
        "b1": "D", "c1": "D",
        "b2": "A",
        "d5": "A", "h8": "K",
    })
    record = play(game, "d5-d1")
    return len(record.captures) == 0


# ---------------------------------------------------------------------------
# 勝敗
# ---------------------------------------------------------------------------


def _king_escapes_to_corner() -> bool:
    game = setup_game({"a5": "K", "f3": "A"}, side=Side.DEFENDERS)
    play(game, "a5-a1")
    return (
        game.outcome.winner == Side.DEFENDERS
        and game.outcome.reason == OutcomeReason.KING_ESCAPED
    )


def _exit_fort_wins() -> bool:
    game = setup_game({
        "f11": "K", "d11": "D", "f10": "D", "g11": "D", "c10": "D",
        "a6": "A", "k6": "A", "f2": "A",
    }, side=Side.DEFENDERS)
    play(game, "c10-e10")
    return (
        game.outcome.winner == Side.DEFENDERS
        and game.outcome.reason == OutcomeReason.KING_ESCAPED
    )


def _encirclement_wins() -> bool:
    ring = ["d4", "e4", "f4", "g4", "h4", "d5", "h5", "d6", "h6",
            "d7", "h7", "d8", "e8", "f8", "h8"]
    pieces = {name: "A" for name in ring}
    pieces.update({"f6": "K", "e6": "D", "g10": "A"})
    game = setup_game(pieces)
    play(game, "g10-g8")
    return (
        game.outcome.winner == Side.ATTACKERS
        and game.outcome.reason == OutcomeReason.KING_CAPTURED
        and game.board.count(PieceType.KING) == 1
    )


def _boxed_defenders_lose() -> bool:
    game = setup_game({"a6": "K", "a5": "A", "a7": "A", "b9": "A"})
    play(game, "b9-b6")
    return (
        game.outcome.winner == Side.ATTACKERS
        and game.outcome.reason == OutcomeReason.OPPONENT_NO_LEGAL_MOVES
    )


def _boxed_attackers_lose() -> bool:
    game = setup_game({"b1": "A", "c1": "D", "b5": "D", "h8": "K"}, side=Side.DEFENDERS)
    play(game, "b5-b2")
    return (
        game.outcome.winner == Side.DEFENDERS
        and game.outcome.reason == OutcomeReason.OPPONENT_NO_LEGAL_MOVES
    )


def _repetition_loses_for_defenders() -> bool:
    game = setup_game({"b2": "A", "j10": "D", "h8": "K"})
    shuffle = ["b2-b3", "j10-j9", "b3-b2", "j9-j10"]
    play(game, *shuffle)  # 1回目の往復
    play(game, *shuffle)  # 2回目: 攻撃側手番の同一局面は3回目だが終局しない
    if game.is_terminal or game.repetition_count() != 3:
        return False
    play(game, "b2-b3")  # 防御側手番で同一局面が3回目
    return (
        game.outcome.winner == Side.ATTACKERS
        and game.outcome.reason == OutcomeReason.DEFENDER_REPETITION
    )


def _illegal_move_changes_nothing() -> bool:
    game = setup_game({"b1": "A", "c1": "D", "f8": "A", "h8": "K"})
    before = game.snapshot()
    attempts = ["f8-j8", "f8-f6", "b1-a1", "c1-c5", "f8-g9"]
    for text in attempts:
        try:
            game.apply_move(parse_move(text))
        except IllegalMoveError:
            continue
        return False
    return game.snapshot() == before and not game.moves


def regression_scenarios() -> list[Scenario]:
    """Return the ordered list of rule scenarios."""
    return [
        Scenario("initial position has 24 attackers, 12 defenders and the king", _initial_counts),
        Scenario("only the king lands on corners and the throne", _no_king_only_landing),
        Scenario("pieces pass through the empty throne", _pass_through_empty_throne),
        Scenario("king may return to the throne", _king_may_land_on_throne),
        Scenario("custodian capture between two attackers", _custodian_between_attackers),
        Scenario("custodian capture against a corner", _custodian_against_corner),
        Scenario("custodian capture against the empty throne", _custodian_against_empty_throne),
        Scenario("occupied throne is not hostile to defenders", _occupied_throne_protects_defender),
        Scenario("king takes part in captures", _king_is_armed),
        Scenario("moving into a sandwich is safe", _moving_into_sandwich_is_safe),
        Scenario("king on the throne needs four attackers", _king_on_throne_needs_four),
        Scenario("king beside the throne needs three attackers", _king_beside_throne_needs_three),
        Scenario("king elsewhere is taken by two attackers", _king_elsewhere_needs_two),
        Scenario("shieldwall bracketed by attackers", _shieldwall_against_attacker),
        Scenario("shieldwall bracketed by a corner", _shieldwall_against_corner),
        Scenario("shieldwall never removes the king", _shieldwall_spares_king),
        Scenario("shieldwall needs an attacker in front of every piece", _shieldwall_needs_every_front),
        Scenario("king escapes to a corner", _king_escapes_to_corner),
        Scenario("exit fort wins for defenders", _exit_fort_wins),
        Scenario("encirclement wins for attackers", _encirclement_wins),
        Scenario("defenders without a move lose", _boxed_defenders_lose),
        Scenario("attackers without a move lose", _boxed_attackers_lose),
        Scenario("third repetition loses for defenders only", _repetition_loses_for_defenders),
        Scenario("illegal moves leave the game unchanged", _illegal_move_changes_nothing),
    ]


def run_scenarios(scenarios: Iterable[Scenario] | None = None) -> ScenarioReport:
    """Run scenarios, collecting failing names instead of raising.

    例外はシナリオごとに捕捉し、"名前: メッセージ" として失敗リストに加える。
    """
    if scenarios is None:
        scenarios = regression_scenarios()
    failures: list[str] = []
    count = 0
    for scenario in scenarios:
        count += 1
        try:
            if not scenario.run():
                failures.append(scenario.name)
        except Exception as e:  # noqa: BLE001
            failures.append(f"{scenario.name}: {e}")
    if failures:
        logger.warning("%d of %d scenarios failed: %s", len(failures), count, failures)
    return ScenarioReport(ok=not failures, failures=failures, count=count)
