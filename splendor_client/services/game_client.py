"""
Service: game_client.py
Rôle:
- Traduire les intentions utilisateur en requêtes (ActionGateway) et brancher le canal temps réel
  (ConnectionManager) sur la session courante.
- Chaque intention suit la même forme : intention → requête → remplacement de la Room OU erreur
  lisible (statut + journal + notification); jamais d'application partielle, jamais de relance.

API exposée à la présentation:
- restore(), create_room(), join_room(), start_game(), refresh_room(), go_home(), close()
- submit_action(), take/adjust via brouillon: adjust_draft(), submit_draft(), reset_draft()
- reserve_card(), buy_card(), pass_turn()

Réponse tardive: si la session a changé entre l'envoi et la réponse, la réponse est ignorée.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from splendor_client.models.messages import ActionPayload, CardSource, GameAction
from splendor_client.models.session import Session
from splendor_client.services.action_gateway import ActionGateway, GatewayError, JoinResult, SessionInvalidError
from splendor_client.services.client_state import ClientState
from splendor_client.services.connection_manager import ConnectionManager
from splendor_client.services.token_draft import DraftRejected

logger = logging.getLogger(__name__)


class GameClient:
    def __init__(
        self,
        state: Optional[ClientState] = None,
        *,
        gateway: Optional[ActionGateway] = None,
        connection: Optional[ConnectionManager] = None,
    ) -> None:
        self.state = state or ClientState()
        self.gateway = gateway or ActionGateway()
        self.connection = connection or ConnectionManager(self.state)

    # ---------- session ----------
    async def _enter(self, session: Optional[Session]) -> None:
        """Unique point de transition de session: persistance + (ré)ouverture du canal."""
        self.state.set_session(session)
        if session is None:
            await self.connection.close()
        else:
            await self.connection.open(session)

    async def restore(self) -> bool:
        """Reprend la session persistée; la purge si le serveur ne la reconnaît plus."""
        session = self.state.store.load()
        if session is None:
            return False
        self.state.set_session(session)
        self.state.log(f"Restored session for room {session.room_id}")
        try:
            room = await self.gateway.load_room(session.room_id)
        except GatewayError as exc:
            self._invalidate(SessionInvalidError(exc.message, code=exc.code, status=exc.status))
            return False
        if self.state.session is not session:
            return False
        self.state.replace_room(room)
        await self.connection.open(session)
        return True

    def _invalidate(self, exc: SessionInvalidError) -> None:
        logger.info("Stored session rejected", extra={"error": exc.message, "status": exc.status})
        self.state.set_session(None)
        self.state.replace_room(None)
        self.state.set_status("Session expired, please rejoin room")
        self.state.log("Stored session is no longer valid")

    async def _adopt(self, result: JoinResult, message: str) -> str:
        ref = result.room.ref
        self.state.replace_room(result.room)
        await self._enter(Session(room_id=ref, player_id=result.player.id, player_name=result.player.name))
        self.state.set_status(message.format(ref=ref))
        self.state.log(message.format(ref=ref))
        return ref

    def _fail(self, exc: GatewayError, log_prefix: str, session: Optional[Session] = None) -> bool:
        """Échec lisible (statut + journal + notification), inerte si la session a changé entre-temps."""
        if session is not None and self.state.session is not session:
            return False
        self.state.set_status(exc.message)
        self.state.log(f"{log_prefix}: {exc.message}")
        self.state.notifications.push(f"{log_prefix}: {exc.message}")
        return False

    async def create_room(self, host_name: str, turn_seconds: Any) -> bool:
        try:
            result = await self.gateway.create_room(host_name, turn_seconds)
        except GatewayError as exc:
            return self._fail(exc, "Create failed")
        await self._adopt(result, "Room {ref} created")
        return True

    async def join_room(self, room_ref: str, player_name: str) -> bool:
        try:
            result = await self.gateway.join_room(room_ref, player_name)
        except GatewayError as exc:
            return self._fail(exc, "Join failed")
        await self._adopt(result, "Joined room {ref}")
        return True

    async def go_home(self) -> None:
        await self._enter(None)
        self.state.replace_room(None)
        self.state.reset_draft()
        self.state.set_status("Ready")
        self.state.log("Back to home")

    async def close(self) -> None:
        """Arrêt du client: canal, compte à rebours et notifications (la session reste persistée)."""
        await self.connection.close()
        self.state.countdown.stop()
        self.state.notifications.clear()

    # ---------- requêtes en session ----------
    async def start_game(self) -> bool:
        session = self.state.session
        if session is None or self.state.room is None:
            return False
        try:
            room = await self.gateway.start_game(session)
        except GatewayError as exc:
            return self._fail(exc, "Start failed", session)
        if self.state.session is not session:
            return False
        self.state.replace_room(room)
        self.state.set_status("Game started")
        self.state.log("Game started")
        return True

    async def refresh_room(self) -> bool:
        session = self.state.session
        if session is None:
            return False
        try:
            room = await self.gateway.load_room(session.room_id)
        except GatewayError as exc:
            return self._fail(exc, "Refresh failed", session)
        if self.state.session is not session:
            return False
        self.state.replace_room(room)
        self.state.set_status("Room refreshed")
        self.state.log("Room refreshed")
        return True

    async def submit_action(self, action: GameAction) -> bool:
        session = self.state.session
        if session is None:
            return False
        try:
            room = await self.gateway.send(session, action)
        except GatewayError as exc:
            return self._fail(exc, "Action failed", session)
        if self.state.session is not session:
            # session fermée entre-temps: réponse inerte
            return False
        self.state.replace_room(room)
        self.state.set_status(f"Action sent: {action.type}")
        self.state.log(f"Action {action.type}")
        return True

    async def reserve_card(self, card_id: str) -> bool:
        return await self.submit_action(GameAction(type="reserve_card", payload=ActionPayload(card_id=card_id)))

    async def buy_card(self, card_id: str, source: CardSource = "tableau") -> bool:
        action = GameAction(type="buy_card", payload=ActionPayload(card_id=card_id, source=source))
        return await self.submit_action(action)

    async def pass_turn(self) -> bool:
        return await self.submit_action(GameAction(type="pass"))

    # ---------- brouillon de jetons ----------
    def adjust_draft(self, color: str, delta: int) -> dict:
        return self.state.adjust_draft(color, delta)

    def reset_draft(self) -> dict:
        return self.state.reset_draft()

    async def submit_draft(self) -> bool:
        try:
            action = self.state.draft.submit()
        except DraftRejected as exc:
            self.state.report_failure(exc.message)
            return False
        ok = await self.submit_action(action)
        if ok:
            self.reset_draft()
        return ok
