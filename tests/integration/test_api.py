"""Integration tests for the FastAPI application: whole battles over HTTP."""

import pytest
from fastapi.testclient import TestClient

from fortress.api.app import create_app
from fortress.api.runtime import ApiState
from fortress.config import Settings
from fortress.content.cards import STARTER_CARD_IDS


@pytest.fixture(params=["json", "sql"])
def client(request, tmp_path):
    """Test client with its own event store."""

    def factory() -> ApiState:
        settings = Settings(
            data_dir=tmp_path,
            event_store=request.param,
            database_url=f"sqlite:///{tmp_path / 'events.db'}",
        )
        return ApiState(settings=settings)

    with TestClient(create_app(state_factory=factory)) as client:
        yield client


def _command(client, payload, player_id="pilot-1"):
    response = client.post(f"/games/{player_id}/commands", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


def _play_out(client, player_id="pilot-1"):
    """End every player turn and let the server answer until the battle is over.

    The opponent keeps its hand through the first server call, so the loop
    only ends a turn once play has begun and the player is active.
    """

    for _ in range(50):
        battle = client.get(f"/games/{player_id}/battle").json()
        if battle["phase"] == "resolved":
            return battle
        if battle["phase"] == "playing" and battle["active_player"] == "player":
            _command(client, {"type": "END_TURN"}, player_id)
        response = client.post(f"/games/{player_id}/opponent-turn")
        assert response.status_code == 200, response.text
    raise AssertionError("battle did not resolve")


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_full_battle_over_http(client):
    _command(client, {"type": "START_GAME"})
    _command(client, {"type": "TRIGGER_BATTLE", "battle_id": "b-1", "opponent_id": "pirates"})
    assert client.get("/games/pilot-1/state").json()["phase"] == "card_selection"

    _command(client, {"type": "START_TACTICAL_BATTLE", "deck": list(STARTER_CARD_IDS[:8])})
    _command(client, {"type": "SKIP_MULLIGAN"})

    battle = _play_out(client)
    assert battle["winner"] in ("player", "opponent", "draw")
    assert battle["victory_condition"] in ("flagship_destroyed", "timeout")
    assert battle["turn_number"] <= battle["round_limit"] * 2

    rejected = client.post("/games/pilot-1/commands", json={"type": "END_TURN"})
    assert rejected.status_code == 422
    assert rejected.json()["reason"] == "battle_resolved"

    summary = client.get("/games/pilot-1/state").json()
    assert summary["phase"] == "aftermath"
    _command(client, {"type": "ACKNOWLEDGE_OUTCOME"})

    summary = client.get("/games/pilot-1/state").json()
    assert summary["phase"] == "hub"
    stats = summary["stats"]
    assert stats["battles_won"] + stats["battles_lost"] + stats["battles_drawn"] == 1

    log = client.get("/games/pilot-1/events").json()
    types = [event["type"] for event in log["events"]]
    assert types.count("TACTICAL_BATTLE_RESOLVED") == 1
    assert types[-1] == "BATTLE_OUTCOME_ACKNOWLEDGED"


def test_players_do_not_share_streams(client):
    _command(client, {"type": "START_GAME"}, "pilot-1")
    _command(client, {"type": "START_GAME"}, "pilot-2")
    _command(
        client,
        {"type": "TRIGGER_BATTLE", "battle_id": "b-9", "opponent_id": "scavengers"},
        "pilot-2",
    )

    assert client.get("/games/pilot-1/state").json()["phase"] == "hub"
    assert client.get("/games/pilot-2/state").json()["phase"] == "card_selection"

    again = client.post("/games/pilot-1/commands", json={"type": "START_GAME"})
    assert again.status_code == 422
    assert again.json()["reason"] == "game_already_started"
