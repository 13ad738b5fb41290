"""
Models / room.py
Rôle:
- Définir le snapshot de salle reçu du serveur (Room) et l'état de partie embarqué (GameState).

Champs clés:
- Room.game: absent tant que la partie n'a pas démarré; sa présence est significative
  (une partie démarrée ne "redémarre" jamais en lobby côté client).
- Room.turn_deadline: horodatage absolu de fin de tour (indicatif, appliqué par le serveur).
- PlayerState.last_action: tag de la dernière action du joueur (journal des deltas).

Notes:
- Ces modèles sont des miroirs : aucune règle de jeu n'est vérifiée ici.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import ConfigDict, Field

from .tokens import TokenSet, WireModel

RoomStatus = Literal["waiting", "playing", "finished"]
Bonus = Literal["white", "blue", "green", "red", "black"]


class Card(WireModel):
    """Carte développement (immuable une fois observée)."""
    model_config = ConfigDict(frozen=True)

    id: str
    tier: int
    bonus: Bonus
    points: int = 0
    cost: TokenSet = Field(default_factory=TokenSet)


class Noble(WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    points: int = 0
    requirement: TokenSet = Field(default_factory=TokenSet)


class Player(WireModel):
    """Joueur vu depuis le lobby."""
    id: str
    name: str


class PlayerState(Player):
    """Joueur en partie: jetons, bonus (or toujours à 0), réserves (≤ 3), points."""
    tokens: TokenSet = Field(default_factory=TokenSet)
    bonuses: TokenSet = Field(default_factory=TokenSet)
    reserved: List[Card] = Field(default_factory=list, max_length=3)
    purchased_count: int = 0
    points: int = 0
    nobles: List[Noble] = Field(default_factory=list)
    is_connected: bool = False
    last_action: str = ""


class GameState(WireModel):
    status: Literal["playing", "finished"] = "playing"
    turn: int = 0
    current_player_id: str = ""
    bank: TokenSet = Field(default_factory=TokenSet)
    tier1: List[Card] = Field(default_factory=list)
    tier2: List[Card] = Field(default_factory=list)
    tier3: List[Card] = Field(default_factory=list)
    deck1_count: int = 0
    deck2_count: int = 0
    deck3_count: int = 0
    nobles: List[Noble] = Field(default_factory=list)
    players: List[PlayerState] = Field(default_factory=list)
    winner_ids: List[str] = Field(default_factory=list)
    final_round: bool = False
    final_turns_left: int = 0

    def player(self, player_id: str) -> Optional[PlayerState]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None


class Room(WireModel):
    """Snapshot complet et autoritaire d'une salle (remplacé en bloc, jamais patché)."""
    id: str
    code: str = ""
    host_id: str = ""
    status: RoomStatus = "waiting"
    players: List[Player] = Field(default_factory=list)
    turn_seconds: int = 0
    turn_deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    game: Optional[GameState] = None

    @property
    def ref(self) -> str:
        """Référence utilisée pour l'adresser (code court s'il existe, sinon id)."""
        return self.code or self.id
