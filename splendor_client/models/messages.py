"""
Models / messages.py
Rôle:
- Actions de jeu envoyées au serveur (GameAction) et messages reçus sur le canal temps réel.

Notes:
- `ActionType` restreint à un jeu de valeurs (Literal) pour éviter les fautes de frappe.
- Les messages serveur portent un champ `type` discriminant :
    {"type": "room_snapshot", "reason": "...", "room": {...}}
    {"type": "action_error", "error": "..."}
    {"type": "pong"}
"""
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from .room import Room
from .tokens import WireModel

ActionType = Literal["take_tokens", "discard_tokens", "adjust_tokens", "reserve_card", "buy_card", "pass"]
CardSource = Literal["tableau", "reserved"]


class ActionPayload(WireModel):
    colors: Optional[List[str]] = None
    adjust: Optional[Dict[str, int]] = None
    card_id: Optional[str] = None
    source: Optional[CardSource] = None


class GameAction(WireModel):
    type: ActionType
    payload: ActionPayload = Field(default_factory=ActionPayload)


class RoomSnapshotMessage(WireModel):
    type: Literal["room_snapshot"]
    reason: str = ""
    room: Room


class ActionErrorMessage(WireModel):
    type: Literal["action_error"]
    error: str = ""


class PongMessage(WireModel):
    type: Literal["pong"]


ServerMessage = Annotated[
    Union[RoomSnapshotMessage, ActionErrorMessage, PongMessage],
    Field(discriminator="type"),
]
SERVER_MESSAGE = TypeAdapter(ServerMessage)


def decode_server_message(raw: Union[str, bytes]):
    """Décode une trame JSON; lève `pydantic.ValidationError` si la forme est inconnue."""
    return SERVER_MESSAGE.validate_json(raw)
