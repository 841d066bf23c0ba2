"""Tests for the FastAPI web application."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from hnefatafl_ai.game.copenhagen.display import parse_square
from hnefatafl_ai.game.copenhagen.moves import decode_move
from hnefatafl_ai.web.app import _games, app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _new_game(client: TestClient, human_side: str = "defenders") -> dict:
    res = client.post("/api/new-game", json={"human_side": human_side, "ai_type": "random"})
    assert res.status_code == 200
    return res.json()


class TestNewGame:
    def test_human_defends(self, client: TestClient) -> None:
        data = _new_game(client)
        assert "game_id" in data
        assert data["state"]["rows"] == 11
        assert data["state"]["cols"] == 11
        # 攻撃側の AI が先に1手指している
        assert data["ai_move"] is not None
        assert data["state"]["side_to_move"] == "defenders"
        assert len(data["state"]["transcript"]) == 1

    def test_human_attacks(self, client: TestClient) -> None:
        data = _new_game(client, "attackers")
        assert data["ai_move"] is None
        assert data["state"]["side_to_move"] == "attackers"
        assert not data["state"]["is_terminal"]
        assert len(data["state"]["squares"]) == 121

    def test_opening_move_releases_lock(self, client: TestClient) -> None:
        data = _new_game(client)
        assert not _games[data["game_id"]]["lock"].locked()

    def test_invalid_ai_type(self, client: TestClient) -> None:
        res = client.post("/api/new-game", json={"ai_type": "mcts"})
        assert res.status_code == 400


class TestMakeMove:
    def test_valid_move(self, client: TestClient) -> None:
        data = _new_game(client)
        legal = data["state"]["legal_moves"]
        res = client.post("/api/move", json={"game_id": data["game_id"], "move": legal[0]})
        assert res.status_code == 200
        body = res.json()
        assert body["player_move"] == legal[0]
        assert "ai_move" in body
        assert len(body["state"]["transcript"]) >= 2

    def test_illegal_move(self, client: TestClient) -> None:
        data = _new_game(client, "attackers")
        res = client.post("/api/move", json={"game_id": data["game_id"], "move": 0})
        assert res.status_code == 400

    def test_out_of_range(self, client: TestClient) -> None:
        data = _new_game(client, "attackers")
        res = client.post("/api/move", json={"game_id": data["game_id"], "move": 99999})
        assert res.status_code == 400

    def test_game_not_found(self, client: TestClient) -> None:
        res = client.post("/api/move", json={"game_id": "nonexistent", "move": 0})
        assert res.status_code == 404

    def test_spectator_cannot_move(self, client: TestClient) -> None:
        data = _new_game(client, "none")
        legal = data["state"]["legal_moves"]
        res = client.post("/api/move", json={"game_id": data["game_id"], "move": legal[0]})
        assert res.status_code == 400


class TestAutoMove:
    def test_ai_vs_ai(self, client: TestClient) -> None:
        data = _new_game(client, "none")
        res = client.post(f"/api/auto-move/{data['game_id']}")
        assert res.status_code == 200
        body = res.json()
        assert body["moved_by"] == 0
        assert decode_move(body["move"]).origin >= 0
        assert body["state"]["side_to_move"] == "defenders"

    def test_human_turn(self, client: TestClient) -> None:
        data = _new_game(client, "attackers")
        res = client.post(f"/api/auto-move/{data['game_id']}")
        assert res.status_code == 400


class TestGetState:
    def test_get_existing_game(self, client: TestClient) -> None:
        data = _new_game(client)
        res = client.get(f"/api/state/{data['game_id']}")
        assert res.status_code == 200
        assert res.json()["rows"] == 11
        assert res.json()["winner"] is None

    def test_get_nonexistent_game(self, client: TestClient) -> None:
        res = client.get("/api/state/nonexistent")
        assert res.status_code == 404


class TestDestinations:
    def test_own_piece(self, client: TestClient) -> None:
        data = _new_game(client, "attackers")
        square = parse_square("d1")
        res = client.get(f"/api/destinations/{data['game_id']}/{square}")
        assert res.status_code == 200
        assert parse_square("d2") in res.json()["destinations"]

    def test_out_of_range(self, client: TestClient) -> None:
        data = _new_game(client, "attackers")
        res = client.get(f"/api/destinations/{data['game_id']}/500")
        assert res.status_code == 400


class TestWorker:
    def test_self_test(self, client: TestClient) -> None:
        res = client.post("/api/worker", json={"kind": "self_test"})
        assert res.status_code == 200
        assert res.json()["ok"] is True

    def test_invalid_request(self, client: TestClient) -> None:
        res = client.post("/api/worker", json={"kind": "nope"})
        assert res.json()["kind"] == "error"

    def test_self_test_endpoint(self, client: TestClient) -> None:
        res = client.get("/api/self-test")
        assert res.status_code == 200
        assert res.json()["failures"] == []


class TestGameFlow:
    def test_play_multiple_moves(self, client: TestClient) -> None:
        """Play several moves without errors."""
        data = _new_game(client)
        game_id = data["game_id"]
        state = data["state"]
        for _ in range(5):
            if state["is_terminal"]:
                break
            res = client.post("/api/move", json={"game_id": game_id, "move": state["legal_moves"][0]})
            assert res.status_code == 200
            state = res.json()["state"]
