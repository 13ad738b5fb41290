"""
Service: reconciler.py
Rôle:
- Valider un snapshot entrant (room_snapshot) contre la Room détenue localement.
- Produire le journal de deltas lisibles (arrivées, actions des joueurs, changement de tour).

Règles:
- Garde d'obsolescence : si la Room détenue a une partie (`game`) et que le snapshot
  entrant n'en a pas, le snapshot est rejeté (une partie ne "redémarre" pas en lobby).
  Un seul delta de diagnostic est produit et la Room détenue reste inchangée.
- Sinon le snapshot est accepté et REMPLACE la Room détenue (pas de fusion champ à champ).

Le remplacement lui-même est fait par le détenteur de l'état (`ClientState.apply_snapshot`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from splendor_client.models.room import PlayerState, Room

# "player_joined" dépend du nombre de joueurs, voir _reason_line
REASON_PHRASES = {
    "game_started": "Game started",
    "player_connected": "A player connected",
    "player_disconnected": "A player disconnected",
}


@dataclass
class ReconcileResult:
    accept: bool
    deltas: List[str] = field(default_factory=list)


def short_id(value: str) -> str:
    """Identifiant raccourci pour l'affichage (`abcd...yz`)."""
    if not value:
        return "-"
    if len(value) <= 6:
        return value
    return f"{value[:4]}...{value[-2:]}"


def action_line(player: PlayerState) -> str:
    return f"{player.name} used {player.last_action} | P:{player.points} | {player.tokens.as_text()}"


def _reason_line(incoming: Room, reason: str) -> str:
    if reason == "player_joined":
        return f"Player joined. Total players: {len(incoming.players)}"
    phrase = REASON_PHRASES.get(reason)
    return phrase or f"Realtime update: {reason}"


def reconcile(previous: Optional[Room], incoming: Room, reason: str) -> ReconcileResult:
    if previous is not None and previous.game is not None and incoming.game is None:
        return ReconcileResult(accept=False, deltas=[f"Ignored stale snapshot: {reason}"])

    deltas = [_reason_line(incoming, reason)]

    # arrivée détectée sur le nombre de joueurs (si la raison ne l'annonce pas déjà)
    if reason != "player_joined" and previous is not None and len(incoming.players) > len(previous.players):
        deltas.append(f"Player joined. Total players: {len(incoming.players)}")

    game = incoming.game
    if game is None:
        return ReconcileResult(accept=True, deltas=deltas)

    prev_game = previous.game if previous is not None else None
    prev_by_id: Dict[str, PlayerState] = {p.id: p for p in (prev_game.players if prev_game else [])}

    for p in game.players:
        prev = prev_by_id.get(p.id)
        if p.last_action and p.last_action != (prev.last_action if prev else None):
            deltas.append(action_line(p))

    if prev_game is not None and prev_game.turn != game.turn:
        current = game.player(game.current_player_id)
        who = current.name if current else short_id(game.current_player_id)
        deltas.append(f"Turn {game.turn} -> {who}")

    return ReconcileResult(accept=True, deltas=deltas)
