"""
Service: connection_manager.py
- Un seul canal temps réel (WebSocket /ws?roomId=..&playerId=..) par session active.
- Machine d'état explicite: CLOSED → CONNECTING → OPEN → CLOSED.
- Ouvrir une nouvelle session ferme d'abord le canal précédent; close() est idempotent.
- Fermeture distante (volontaire ou panne réseau) → CLOSED + notice; PAS de reconnexion auto.

Messages entrants (JSON, champ `type`):
- room_snapshot {reason, room} → ClientState.apply_snapshot (réconciliation + remplacement)
- action_error  {error}        → notification + statut + journal (la Room n'est jamais touchée)
- pong                         → ignoré
- autre / illisible            → diagnostic local, jamais d'exception vers l'appelant

Messages sortants: {"type": "action", "action": {...}} et {"type": "ping"}.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Optional, Union

import orjson
from pydantic import ValidationError
from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from splendor_client.config.settings import build_ws_url, settings
from splendor_client.models.messages import (
    ActionErrorMessage,
    GameAction,
    RoomSnapshotMessage,
    decode_server_message,
)
from splendor_client.models.session import Session

logger = logging.getLogger(__name__)

Connector = Callable[[str], Awaitable[Any]]


class ChannelState(str, enum.Enum):
    CLOSED = "closed"
    CONNECTING = "connecting"
    OPEN = "open"


class ChannelClosedError(RuntimeError):
    """Envoi demandé alors qu'aucun canal n'est ouvert."""


class ConnectionManager:
    def __init__(self, state, *, connector: Optional[Connector] = None, api_base: Optional[str] = None) -> None:
        # `state` = ClientState (détenteur unique de la Room / du statut / des notifications)
        self.state = state
        self.connector: Connector = connector or ws_connect
        self.api_base = api_base or settings.API_BASE
        self.channel_state = ChannelState.CLOSED
        self.session: Optional[Session] = None
        self._channel: Any = None
        self._reader: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def is_open(self) -> bool:
        return self.channel_state is ChannelState.OPEN

    # ---------- cycle de vie ----------
    async def open(self, session: Session) -> None:
        """Ouvre le canal de `session` (après avoir fermé l'éventuel canal précédent)."""
        await self.close()
        self._generation += 1
        generation = self._generation
        self.session = session
        self.channel_state = ChannelState.CONNECTING
        url = build_ws_url(self.api_base, session.room_id, session.player_id)

        try:
            channel = await self.connector(url)
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            logger.warning(
                "WS connect failed",
                extra={"room_id": session.room_id, "player_id": session.player_id, "error": str(exc)},
            )
            if generation == self._generation:
                self.channel_state = ChannelState.CLOSED
                self.state.channel_notice("WebSocket disconnected", "WS disconnected")
            return

        if generation != self._generation:
            # close() ou open() concurrent pendant la connexion: ce canal est déjà périmé
            await self._close_quietly(channel)
            return

        self._channel = channel
        self.channel_state = ChannelState.OPEN
        self.state.channel_notice("WebSocket connected", "WS connected")
        self._reader = asyncio.get_running_loop().create_task(self._read_loop(channel, generation))

    async def close(self) -> None:
        """Fermeture explicite et idempotente; libère la référence au canal."""
        self._generation += 1
        was_open = self.channel_state is ChannelState.OPEN
        channel, self._channel = self._channel, None
        reader, self._reader = self._reader, None
        self.session = None
        self.channel_state = ChannelState.CLOSED

        if reader and not reader.done() and reader is not asyncio.current_task():
            reader.cancel()
            try:
                await reader
            except asyncio.CancelledError:
                pass
        if channel is not None:
            await self._close_quietly(channel)
        if was_open:
            self.state.channel_notice("WebSocket disconnected", "WS disconnected")

    async def _close_quietly(self, channel: Any) -> None:
        try:
            await channel.close()
        except (OSError, WebSocketException):
            logger.debug("WS close raised", exc_info=True)

    # ---------- réception ----------
    async def _read_loop(self, channel: Any, generation: int) -> None:
        try:
            while True:
                raw = await channel.recv()
                try:
                    self.dispatch(raw)
                except Exception:
                    # erreur locale (observateur, état dérivé): le canal reste à l'écoute
                    logger.exception("WS dispatch failed", extra={"payload": str(raw)[:200]})
                    self.state.channel_notice("Realtime update failed", "WS update could not be applied")
        except ConnectionClosed as exc:
            logger.info("WS closed by remote", extra={"close_reason": str(exc)})
        except OSError:
            logger.warning("WS network failure", exc_info=True)
        finally:
            if generation == self._generation:
                self._channel = None
                self._reader = None
                self.channel_state = ChannelState.CLOSED
                await self._close_quietly(channel)
                self.state.channel_notice("WebSocket disconnected", "WS disconnected")

    def dispatch(self, raw: Union[str, bytes]) -> None:
        """Décode un message entrant et le route vers le détenteur d'état."""
        try:
            message = decode_server_message(raw)
        except ValidationError:
            logger.warning("Unknown WS payload", extra={"payload": str(raw)[:200]})
            self.state.channel_notice("Received unknown WS payload", "Unknown WS payload")
            return

        if isinstance(message, RoomSnapshotMessage):
            self.state.apply_snapshot(message.room, message.reason)
        elif isinstance(message, ActionErrorMessage):
            self.state.report_action_rejected(message.error)

    # ---------- émission ----------
    async def _send(self, payload: dict) -> None:
        if not self.is_open or self._channel is None:
            raise ChannelClosedError("channel is not open")
        await self._channel.send(orjson.dumps(payload).decode())

    async def send_action(self, action: GameAction) -> None:
        """Soumet une action par le canal (le résultat arrive en room_snapshot / action_error)."""
        await self._send({"type": "action", "action": action.to_wire()})

    async def ping(self) -> None:
        await self._send({"type": "ping"})
