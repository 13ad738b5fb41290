"""
Faux serveur de salles (FastAPI) pour les tests du client.
Reproduit les contrats REST du vrai serveur sans aucune règle de jeu:
- création / join / start / lecture / action, erreurs {code, message}.
- une action visant la carte "missing" est refusée (400) pour tester les rejets.
"""
from __future__ import annotations

from typing import Any, Dict
from uuid import uuid4

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class CreateBody(BaseModel):
    hostName: str
    turnSeconds: int = 30


class JoinBody(BaseModel):
    playerName: str


class StartBody(BaseModel):
    playerId: str


class ActionBody(BaseModel):
    playerId: str
    action: Dict[str, Any]


def _error(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"code": code, "message": message})


def _tokens(**kw: int) -> Dict[str, int]:
    base = {"white": 0, "blue": 0, "green": 0, "red": 0, "black": 0, "gold": 0}
    base.update(kw)
    return base


def build_app() -> FastAPI:
    app = FastAPI(title="Fake Splendor rooms")
    rooms: Dict[str, Dict[str, Any]] = {}
    app.state.rooms = rooms
    app.state.actions = []

    def _find(ref: str):
        for room in rooms.values():
            if ref in (room["id"], room["code"]):
                return room
        return None

    @app.post("/api/rooms")
    async def create(body: CreateBody):
        if not body.hostName.strip():
            return _error(400, "invalid_host_name", "hostName is required")
        pid = uuid4().hex
        room = {
            "id": uuid4().hex,
            "code": f"R{len(rooms) + 1:04d}",
            "hostId": pid,
            "status": "waiting",
            "players": [{"id": pid, "name": body.hostName}],
            "turnSeconds": body.turnSeconds,
        }
        rooms[room["id"]] = room
        return {"room": room, "player": {"id": pid, "name": body.hostName}}

    @app.post("/api/rooms/{ref}/join")
    async def join(ref: str, body: JoinBody):
        room = _find(ref)
        if room is None:
            return _error(404, "room_not_found", "room not found")
        if len(room["players"]) >= 4:
            return _error(409, "room_full", "room is full")
        pid = uuid4().hex
        room["players"].append({"id": pid, "name": body.playerName})
        return {"room": room, "player": {"id": pid, "name": body.playerName}}

    @app.post("/api/rooms/{ref}/start")
    async def start(ref: str, body: StartBody):
        room = _find(ref)
        if room is None:
            return _error(404, "room_not_found", "room not found")
        if body.playerId != room["hostId"]:
            return _error(403, "only_host_can_start", "only host can start")
        room["status"] = "playing"
        room["game"] = {
            "status": "playing",
            "turn": 1,
            "currentPlayerId": room["hostId"],
            "bank": _tokens(white=4, blue=4, green=4, red=4, black=4, gold=5),
            "players": [
                {"id": p["id"], "name": p["name"], "tokens": _tokens(), "bonuses": _tokens()}
                for p in room["players"]
            ],
        }
        return room

    @app.get("/api/rooms/{ref}")
    async def get_room(ref: str):
        room = _find(ref)
        if room is None:
            return _error(404, "room_not_found", "room not found")
        return room

    @app.post("/api/rooms/{ref}/actions")
    async def apply(ref: str, body: ActionBody):
        room = _find(ref)
        if room is None:
            return _error(404, "room_not_found", "room not found")
        if room.get("game") is None:
            return _error(409, "invalid_room_state", "game not started")
        if (body.action.get("payload") or {}).get("cardId") == "missing":
            return _error(400, "invalid_action", "card not found")
        app.state.actions.append(body.model_dump())
        game = room["game"]
        game["turn"] += 1
        for p in game["players"]:
            if p["id"] == body.playerId:
                p["lastAction"] = body.action.get("type")
        return room

    return app
