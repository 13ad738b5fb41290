"""
Service: action_gateway.py
- Centralise les appels requête/réponse vers le serveur de salles (REST).
- Chaque appel = un aller-retour; succès → Room complète, échec → GatewayError.
- Aucune relance automatique (pas d'adaptateur Retry) et aucune application partielle.

Endpoints:
- POST /api/rooms                      {hostName, turnSeconds}  → {room, player}
- POST /api/rooms/{ref}/join           {playerName}             → {room, player}
- POST /api/rooms/{ref}/start          {playerId}               → Room
- GET  /api/rooms/{ref}                                         → Room
- POST /api/rooms/{ref}/actions        {playerId, action}       → Room
Erreur serveur: {"code": "...", "message": "..."} avec un statut HTTP >= 400.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import quote
from uuid import uuid4

import anyio
import requests

from splendor_client.config.settings import settings
from splendor_client.models.messages import GameAction
from splendor_client.models.room import Player, Room
from splendor_client.models.session import Session
from splendor_client.models.tokens import WireModel

logger = logging.getLogger(__name__)


class GatewayError(RuntimeError):
    """Échec d'un appel serveur (refus métier, statut HTTP, transport, JSON invalide)."""

    def __init__(self, message: str, *, code: str = "", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class SessionInvalidError(GatewayError):
    """Le serveur ne reconnaît plus la session restaurée."""


class JoinResult(WireModel):
    """Réponse de création / join : la salle + le joueur attribué."""
    room: Room
    player: Player


def clamp_turn_seconds(value: Any) -> int:
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        seconds = 0
    if not seconds:
        seconds = settings.TURN_SECONDS_DEFAULT
    return max(settings.TURN_SECONDS_MIN, min(settings.TURN_SECONDS_MAX, seconds))


class RoomApiClient:
    """
    Client HTTP synchrone (requests) vers le serveur de salles.
    - Journalise chaque requête avec un identifiant de corrélation.
    - `session` injectable (tests: TestClient FastAPI ou Mock).
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[Union[float, Tuple[float, float]]] = None,
    ) -> None:
        self.api_base = (api_base or settings.API_BASE).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or settings.HTTP_TIMEOUT

    def _url(self, *parts: str) -> str:
        return self.api_base + "/api/rooms" + "".join("/" + quote(p, safe="") for p in parts)

    def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        request_id = f"{method.lower()}-{uuid4().hex}"
        logger.debug("Room API request start", extra={"api_url": url, "request_id": request_id})
        try:
            if method == "GET":
                response = self.session.get(url, timeout=self.timeout)
            else:
                response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.warning("Room API request timeout", extra={"api_url": url, "request_id": request_id})
            raise GatewayError("request timed out", code="timeout") from exc
        except requests.RequestException as exc:
            logger.error("Room API request failed", exc_info=True, extra={"api_url": url, "request_id": request_id})
            raise GatewayError(f"request failed: {exc}", code="transport") from exc

        if response.status_code >= 400:
            raise self._error_from(response, request_id)

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Invalid JSON payload from room API", extra={"api_url": url, "request_id": request_id})
            raise GatewayError("invalid JSON payload", code="invalid_json", status=response.status_code) from exc

    @staticmethod
    def _error_from(response: Any, request_id: str) -> GatewayError:
        code, message = "", ""
        try:
            body = response.json()
            if isinstance(body, dict):
                code = str(body.get("code") or "")
                message = str(body.get("message") or "")
        except ValueError:
            pass
        message = message or f"HTTP {response.status_code}"
        logger.info(
            "Room API rejected request",
            extra={"request_id": request_id, "status": response.status_code, "code": code},
        )
        return GatewayError(message, code=code, status=response.status_code)

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except ValueError as exc:
            raise GatewayError("invalid room payload", code="invalid_payload") from exc

    # ---------- endpoints ----------
    def create_room(self, host_name: str, turn_seconds: Any) -> JoinResult:
        payload = {"hostName": host_name.strip(), "turnSeconds": clamp_turn_seconds(turn_seconds)}
        return self._parse(JoinResult, self._request("POST", self._url(), payload))

    def join_room(self, room_ref: str, player_name: str) -> JoinResult:
        data = self._request("POST", self._url(room_ref.strip(), "join"), {"playerName": player_name.strip()})
        return self._parse(JoinResult, data)

    def start_game(self, room_ref: str, player_id: str) -> Room:
        return self._parse(Room, self._request("POST", self._url(room_ref, "start"), {"playerId": player_id}))

    def load_room(self, room_ref: str) -> Room:
        return self._parse(Room, self._request("GET", self._url(room_ref)))

    def apply_action(self, room_ref: str, player_id: str, action: GameAction) -> Room:
        payload = {"playerId": player_id, "action": action.to_wire()}
        return self._parse(Room, self._request("POST", self._url(room_ref, "actions"), payload))


class ActionGateway:
    """
    Façade asynchrone: l'appel bloquant part dans un thread (anyio) et la boucle
    ne se suspend qu'en attente de la réponse. Pas d'annulation, pas de relance.
    """

    def __init__(self, client: Optional[RoomApiClient] = None) -> None:
        self.client = client or RoomApiClient()

    async def _call(self, fn, *args):
        return await anyio.to_thread.run_sync(functools.partial(fn, *args))

    async def create_room(self, host_name: str, turn_seconds: Any) -> JoinResult:
        return await self._call(self.client.create_room, host_name, turn_seconds)

    async def join_room(self, room_ref: str, player_name: str) -> JoinResult:
        return await self._call(self.client.join_room, room_ref, player_name)

    async def start_game(self, session: Session) -> Room:
        return await self._call(self.client.start_game, session.room_id, session.player_id)

    async def load_room(self, room_ref: str) -> Room:
        return await self._call(self.client.load_room, room_ref)

    async def send(self, session: Session, action: GameAction) -> Room:
        return await self._call(self.client.apply_action, session.room_id, session.player_id, action)
