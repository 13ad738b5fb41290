"""
Service: client_state.py
Rôle:
- Source de vérité unique du client : Session, Room, brouillon de jetons, notifications,
  compte à rebours, ligne de statut et journal d'événements.
- L'état n'est modifié QUE par les méthodes explicites ci-dessous; la couche de présentation
  s'abonne (`subscribe`) et relit l'état, sans jamais le muter directement.

Mises à jour de la Room (sérialisées par ordre d'arrivée, boucle asyncio unique):
- réponse positive d'un appel ActionGateway → replace_room()
- snapshot accepté par le réconciliateur      → apply_snapshot()

Sujets notifiés aux abonnés: "session", "room", "status", "log", "notifications",
"countdown", "draft".
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from splendor_client.config.settings import settings
from splendor_client.models.room import PlayerState, Room
from splendor_client.models.session import Session
from splendor_client.models.tokens import TokenSet
from splendor_client.services.countdown import CountdownDeriver
from splendor_client.services.notifications import NotificationQueue
from splendor_client.services.reconciler import ReconcileResult, reconcile, short_id
from splendor_client.services.session_store import SessionStore
from splendor_client.services.token_draft import TokenDraftEngine

logger = logging.getLogger(__name__)

Observer = Callable[[str], None]


class ClientState:
    def __init__(
        self,
        store: Optional[SessionStore] = None,
        *,
        notifications: Optional[NotificationQueue] = None,
        countdown: Optional[CountdownDeriver] = None,
        log_limit: Optional[int] = None,
    ) -> None:
        self.store = store or SessionStore()
        self.session: Optional[Session] = None
        self.room: Optional[Room] = None
        self.status_text = "Ready"
        self.event_log: List[str] = []
        self.log_limit = log_limit or settings.EVENT_LOG_LIMIT
        self.draft = TokenDraftEngine()
        self.notifications = notifications or NotificationQueue()
        self.notifications.on_change = lambda: self._notify("notifications")
        self.countdown = countdown or CountdownDeriver()
        self.countdown.on_change = lambda _value: self._notify("countdown")
        self._observers: List[Observer] = []

    # ---------- abonnements ----------
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def _notify(self, topic: str) -> None:
        for observer in list(self._observers):
            observer(topic)

    # ---------- session ----------
    def set_session(self, session: Optional[Session]) -> None:
        """Change l'identité courante et la persiste (save si présente, clear sinon)."""
        self.session = session
        if session is None:
            self.store.clear()
        else:
            self.store.save(session)
        self._notify("session")

    # ---------- room ----------
    def replace_room(self, room: Optional[Room]) -> None:
        """Remplacement complet de la Room (jamais de fusion champ à champ)."""
        self.room = room
        self.countdown.sync(room)
        self._notify("room")

    def apply_snapshot(self, incoming: Room, reason: str) -> ReconcileResult:
        result = reconcile(self.room, incoming, reason)
        for line in result.deltas:
            self.log(line)
        if not result.accept:
            logger.info("Stale snapshot ignored", extra={"reason": reason})
            return result
        self.replace_room(incoming)
        self.set_status(f"Realtime update: {reason}")
        return result

    # ---------- brouillon ----------
    def adjust_draft(self, color: str, delta: int) -> dict:
        """Ajuste le brouillon avec les bornes du moment (banque et main courantes)."""
        draft = self.draft.adjust(color, delta, self.bank, self.owned_tokens)
        self._notify("draft")
        return draft

    def reset_draft(self) -> dict:
        draft = self.draft.reset()
        self._notify("draft")
        return draft

    # ---------- statut / journal / notifications ----------
    def set_status(self, text: str) -> None:
        self.status_text = text
        self._notify("status")

    def log(self, message: str) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        self.event_log = [f"{stamp} {message}", *self.event_log][: self.log_limit]
        self._notify("log")

    def channel_notice(self, status: str, log_line: str) -> None:
        self.set_status(status)
        self.log(log_line)

    def report_failure(self, text: str, *, notify: bool = True) -> None:
        """Échec lisible: statut + journal (+ notification éphémère)."""
        self.set_status(text)
        self.log(text)
        if notify:
            self.notifications.push(text)

    def report_action_rejected(self, error: str) -> None:
        # rejet serveur d'une action: la Room reste inchangée
        self.report_failure(f"Action rejected: {error}")

    # ---------- vues dérivées ----------
    @property
    def my_player_state(self) -> Optional[PlayerState]:
        if self.room is None or self.room.game is None or self.session is None:
            return None
        return self.room.game.player(self.session.player_id)

    @property
    def current_player_name(self) -> str:
        if self.room is None or self.room.game is None:
            return "-"
        game = self.room.game
        current = game.player(game.current_player_id)
        return current.name if current else short_id(game.current_player_id)

    @property
    def bank(self) -> TokenSet:
        if self.room is None or self.room.game is None:
            return TokenSet()
        return self.room.game.bank

    @property
    def owned_tokens(self) -> TokenSet:
        me = self.my_player_state
        return me.tokens if me else TokenSet()

    @property
    def is_my_turn(self) -> bool:
        me = self.my_player_state
        return bool(me and self.room and self.room.game and self.room.game.current_player_id == me.id)

    @staticmethod
    def player_tokens_text(player: PlayerState) -> str:
        return player.tokens.as_text()

    @staticmethod
    def total_tokens(player: PlayerState) -> int:
        return player.tokens.total()

    @staticmethod
    def total_cards(player: PlayerState) -> int:
        return player.purchased_count + len(player.nobles)
