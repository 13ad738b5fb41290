import asyncio
from unittest.mock import Mock

import pytest
import requests

pytest.importorskip("httpx", reason="httpx requis pour les tests client FastAPI")

from fastapi.testclient import TestClient

from fake_server import build_app
from splendor_client.models.messages import ActionPayload, GameAction
from splendor_client.models.session import Session
from splendor_client.services.action_gateway import (
    ActionGateway,
    GatewayError,
    RoomApiClient,
    clamp_turn_seconds,
)


@pytest.fixture
def server():
    return build_app()


@pytest.fixture
def api(server):
    # httpx n'accepte pas le couple (connect, read) de requests: timeout scalaire
    return RoomApiClient("http://testserver", session=TestClient(server), timeout=10.0)


def test_create_join_start_flow(api, server):
    created = api.create_room("  Alice ", 45)
    assert created.player.name == "Alice"
    assert created.room.ref == "R0001"
    assert created.room.turn_seconds == 45

    joined = api.join_room(created.room.ref, "Priya")
    assert [p.name for p in joined.room.players] == ["Alice", "Priya"]

    room = api.start_game(created.room.ref, created.player.id)
    assert room.game is not None
    assert room.game.turn == 1
    assert room.game.bank.gold == 5


def test_apply_action_sends_wire_payload(api, server):
    created = api.create_room("Alice", 30)
    api.start_game(created.room.ref, created.player.id)

    action = GameAction(type="take_tokens", payload=ActionPayload(colors=["red", "blue", "green"]))
    room = api.apply_action(created.room.ref, created.player.id, action)

    assert room.game.turn == 2
    assert room.game.player(created.player.id).last_action == "take_tokens"
    assert server.state.actions == [
        {
            "playerId": created.player.id,
            "action": {"type": "take_tokens", "payload": {"colors": ["red", "blue", "green"]}},
        }
    ]


def test_server_error_message_is_surfaced(api):
    with pytest.raises(GatewayError) as exc:
        api.load_room("NOPE")
    assert exc.value.message == "room not found"
    assert exc.value.code == "room_not_found"
    assert exc.value.status == 404


def test_start_by_non_host_rejected(api):
    created = api.create_room("Alice", 30)
    joined = api.join_room(created.room.ref, "Bob")
    with pytest.raises(GatewayError, match="only host can start"):
        api.start_game(created.room.ref, joined.player.id)


def test_error_without_body_uses_status():
    response = Mock(status_code=502)
    response.json.side_effect = ValueError("no json")
    session = Mock()
    session.get.return_value = response

    with pytest.raises(GatewayError, match="HTTP 502"):
        RoomApiClient("http://x", session=session).load_room("R1")


def test_transport_failure_is_not_retried():
    session = Mock()
    session.post.side_effect = requests.ConnectionError("refused")
    client = RoomApiClient("http://x", session=session)

    with pytest.raises(GatewayError) as exc:
        client.apply_action("R1", "p1", GameAction(type="pass"))
    assert exc.value.code == "transport"
    assert session.post.call_count == 1


def test_timeout_is_reported():
    session = Mock()
    session.get.side_effect = requests.Timeout()
    with pytest.raises(GatewayError, match="timed out"):
        RoomApiClient("http://x", session=session).load_room("R1")


def test_invalid_room_payload():
    response = Mock(status_code=200)
    response.json.return_value = {"unexpected": True}
    session = Mock()
    session.get.return_value = response
    with pytest.raises(GatewayError, match="invalid room payload"):
        RoomApiClient("http://x", session=session).load_room("R1")


@pytest.mark.parametrize("value,expected", [(30, 30), (1, 5), (1000, 300), ("abc", 30), (0, 30), ("120", 120), (None, 30)])
def test_clamp_turn_seconds(value, expected):
    assert clamp_turn_seconds(value) == expected


def test_async_gateway_uses_session_identity():
    client = Mock()
    client.apply_action.return_value = "room"
    gateway = ActionGateway(client)
    session = Session(room_id="ABCD", player_id="p1", player_name="Alice")
    action = GameAction(type="pass")

    result = asyncio.run(gateway.send(session, action))

    assert result == "room"
    client.apply_action.assert_called_once_with("ABCD", "p1", action)
