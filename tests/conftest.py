from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import orjson
import pytest
from websockets.exceptions import ConnectionClosedOK

from splendor_client.models.room import Room
from splendor_client.services.session_store import SessionStore


def player_state(pid: str, name: str, *, points: int = 0, last_action: str = "", **tokens: int) -> Dict[str, Any]:
    return {
        "id": pid,
        "name": name,
        "tokens": dict(tokens),
        "bonuses": {},
        "points": points,
        "lastAction": last_action,
        "isConnected": True,
    }


def build_room(
    *,
    players: Optional[List[Dict[str, Any]]] = None,
    game: Optional[Dict[str, Any]] = None,
    **extra: Any,
) -> Room:
    lobby = players if players is not None else [{"id": "p1", "name": "Alice"}, {"id": "p2", "name": "Priya"}]
    data: Dict[str, Any] = {
        "id": "room-1",
        "code": "ABCD",
        "hostId": "p1",
        "status": "playing" if game else "waiting",
        "players": lobby,
        "turnSeconds": 30,
    }
    data.update(extra)
    if game is not None:
        data["game"] = game
    return Room.model_validate(data)


def build_game(turn: int = 1, current: str = "p1", players: Optional[List[Dict[str, Any]]] = None, **extra: Any):
    game = {
        "turn": turn,
        "currentPlayerId": current,
        "bank": {"white": 4, "blue": 4, "green": 4, "red": 4, "black": 4, "gold": 5},
        "players": players if players is not None else [player_state("p1", "Alice"), player_state("p2", "Priya")],
    }
    game.update(extra)
    return game


@pytest.fixture
def store(tmp_path):
    return SessionStore(path=tmp_path / "session.json")


class FakeChannel:
    """Canal en mémoire: `feed` pousse une trame, `hang_up` simule une fermeture distante."""

    def __init__(self):
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.sent = []
        self.closed = False

    def feed(self, payload):
        self.inbox.put_nowait(payload if isinstance(payload, str) else orjson.dumps(payload).decode())

    def hang_up(self):
        self.inbox.put_nowait(None)

    async def recv(self):
        item = await self.inbox.get()
        if item is None:
            raise ConnectionClosedOK(None, None)
        return item

    async def send(self, data):
        self.sent.append(orjson.loads(data))

    async def close(self):
        self.closed = True


class FakeConnector:
    def __init__(self):
        self.urls = []
        self.channels = []

    async def __call__(self, url):
        self.urls.append(url)
        channel = FakeChannel()
        self.channels.append(channel)
        return channel
