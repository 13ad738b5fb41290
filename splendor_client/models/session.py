"""
Models / session.py
Rôle:
- Identité locale d'un joueur (Session) et notification éphémère (Notification).

Champs:
- room_id: référence de salle (code court de préférence).
- player_id: identifiant attribué par le serveur à la création / au join.
- player_name: nom affiché.
"""
from pydantic import BaseModel, Field

from .tokens import WireModel


class Session(WireModel):
    """Triplet persistant (roomId, playerId, playerName)."""
    room_id: str = Field(min_length=1)
    player_id: str = Field(min_length=1)
    player_name: str = ""


class Notification(BaseModel):
    id: int
    text: str
