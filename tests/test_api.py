import sqlite3

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from app.main import app
from draft import board as board_module


@pytest.fixture
def client(db_path, monkeypatch):
    monkeypatch.setenv("DRAFT_DB_PATH", db_path)
    with TestClient(app) as c:
        yield c


def _as(profile_id):
    return {"X-Profile-Id": profile_id}


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["ok"] is True


def test_board_requires_a_known_profile(client, make_game):
    gid = make_game()
    assert client.get(f"/api/games/{gid}/draft").status_code == 401
    res = client.get(f"/api/games/{gid}/draft", headers=_as("ghost"))
    assert res.status_code == 401
    assert res.json()["detail"]["code"] == "UNAUTHENTICATED"


def test_board_for_the_picker(client, make_game):
    gid = make_game(restrictions=[("X", "P3")])
    res = client.get(f"/api/games/{gid}/draft", headers=_as("X"))
    assert res.status_code == 200
    board = res.json()["board"]
    assert board["is_my_turn"] is True
    assert board["current_picker_name"] == "parent-X"
    assert board["state"]["current_round"] == 1
    assert board["state"]["current_picker_id"] == "X"
    players = {p["player_id"]: p for p in board["pool"]["players"]}
    assert players["P3"]["is_restricted"] is True
    assert players["P1"]["is_restricted"] is False


def test_unknown_game_is_404(client, make_game):
    make_game()
    res = client.get("/api/games/NOPE/draft", headers=_as("X"))
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "GAME_NOT_FOUND"


def test_pick_flow(client, make_game):
    gid = make_game(restrictions=[("Y", "P1")])

    res = client.post(f"/api/games/{gid}/draft/picks", json={"player_id": "P2"}, headers=_as("Y"))
    assert res.status_code == 403
    assert res.json()["detail"]["code"] == "NOT_YOUR_TURN"

    res = client.post(f"/api/games/{gid}/draft/picks", json={"player_id": "P2"}, headers=_as("X"))
    assert res.status_code == 200
    assert res.json()["pick"]["pick_number"] == 1

    res = client.post(f"/api/games/{gid}/draft/picks", json={"player_id": "P1"}, headers=_as("Y"))
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "PLAYER_RESTRICTED"

    res = client.post(f"/api/games/{gid}/draft/picks", json={"player_id": "P2"}, headers=_as("Y"))
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "PLAYER_ALREADY_DRAFTED"


def test_commissioner_override_over_http(client, make_game):
    gid = make_game()
    res = client.post(
        f"/api/games/{gid}/draft/picks",
        json={"player_id": "P3", "forced_parent_id": "Z"},
        headers=_as("C"),
    )
    assert res.status_code == 200
    pick = res.json()["pick"]
    assert pick["picked_by_profile_id"] == "Z"
    assert pick["source"] == "commissioner_override"


def test_auto_pick_endpoint(client, make_game):
    gid = make_game()
    res = client.post(f"/api/games/{gid}/draft/auto-pick", headers=_as("X"))
    assert res.status_code == 200
    pick = res.json()["pick"]
    assert pick["source"] == "auto"
    # no history: every average is 0, so the first player by name wins
    assert pick["player_id"] == "P1"

    res = client.post(f"/api/games/{gid}/draft/auto-pick", headers=_as("X"))
    assert res.status_code == 403


def test_live_board_follows_picks(client, make_game):
    gid = make_game()
    with client.websocket_connect(f"/api/games/{gid}/draft/ws?profile_id=Y") as ws:
        first = ws.receive_json()
        assert first["type"] == "draft_board"
        assert first["board"]["is_my_turn"] is False
        assert first["board"]["state"]["pick_count"] == 0

        res = client.post(f"/api/games/{gid}/draft/picks", json={"player_id": "P1"}, headers=_as("X"))
        assert res.status_code == 200

        update = ws.receive_json()
        assert update["type"] == "draft_board"
        assert update["board"]["state"]["pick_count"] == 1
        assert update["board"]["is_my_turn"] is True

        ws.send_text("resync")
        again = ws.receive_json()
        assert again["board"]["state"]["pick_count"] == 1


def test_live_board_requires_identity(client, make_game):
    gid = make_game()
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/api/games/{gid}/draft/ws") as ws:
            ws.receive_json()


def _unreachable_store(*args, **kwargs):
    raise sqlite3.OperationalError("unable to open database file")


def test_board_is_503_when_the_store_cannot_be_opened(client, make_game, monkeypatch):
    gid = make_game()
    monkeypatch.setattr("app.services.draft_facade.LeagueRepo", _unreachable_store)
    res = client.get(f"/api/games/{gid}/draft", headers=_as("X"))
    assert res.status_code == 503
    assert res.json()["detail"]["code"] == "STORE_UNAVAILABLE"


def test_live_board_reports_store_errors_and_recovers(client, make_game, monkeypatch):
    gid = make_game()
    real_repo = board_module.LeagueRepo
    monkeypatch.setattr(board_module, "LeagueRepo", _unreachable_store)
    with client.websocket_connect(f"/api/games/{gid}/draft/ws?profile_id=X") as ws:
        first = ws.receive_json()
        assert first["type"] == "error"
        assert first["error"]["code"] == "STORE_UNAVAILABLE"

        monkeypatch.setattr(board_module, "LeagueRepo", real_repo)
        ws.send_text("resync")
        again = ws.receive_json()
        assert again["type"] == "draft_board"
        assert again["board"]["is_my_turn"] is True
