"""
Service: countdown.py
Rôle:
- Dériver localement le temps restant du tour à partir de `room.turn_deadline` (aucun appel réseau).
- Tâche périodique (0.2 s) démarrée/arrêtée uniquement en fonction de la présence
  d'une partie ET d'une échéance : `sync(room)` est appelé à chaque remplacement de Room.

Règle:
- remaining = max(0, ceil((deadline - now) / 1s))
- pas de partie / pas d'échéance → tâche arrêtée, valeur 0.
- nouvelle échéance → la tâche est relancée sur la nouvelle valeur.
"""
from __future__ import annotations

import asyncio
import math
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from splendor_client.config.settings import settings
from splendor_client.models.room import Room


def deadline_epoch(deadline: datetime) -> float:
    # une échéance sans fuseau est interprétée en UTC (format serveur)
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    return deadline.timestamp()


def remaining_seconds(deadline: datetime, now: float) -> int:
    return max(0, math.ceil(deadline_epoch(deadline) - now))


class CountdownDeriver:
    def __init__(
        self,
        tick: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        on_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.tick_seconds = settings.COUNTDOWN_TICK_SECONDS if tick is None else tick
        self.clock = clock
        self.on_change = on_change
        self.value = 0
        self._deadline: Optional[datetime] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return bool(self._task and not self._task.done())

    def sync(self, room: Optional[Room]) -> None:
        """Aligne la tâche sur la Room courante (démarrage, relance ou arrêt)."""
        deadline = room.turn_deadline if room is not None and room.game is not None else None
        if deadline is None:
            self.stop()
            return
        if deadline == self._deadline and self.running:
            return

        self._cancel()
        self._deadline = deadline
        self._tick()
        self._task = asyncio.get_running_loop().create_task(self._runner(deadline))

    def stop(self) -> None:
        self._cancel()
        self._deadline = None
        self._set(0)

    def _cancel(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    def _tick(self) -> None:
        if self._deadline is not None:
            self._set(remaining_seconds(self._deadline, self.clock()))

    async def _runner(self, deadline: datetime) -> None:
        try:
            while self._deadline == deadline:
                await asyncio.sleep(self.tick_seconds)
                self._tick()
        except asyncio.CancelledError:
            return

    def _set(self, value: int) -> None:
        if value != self.value:
            self.value = value
            if self.on_change:
                self.on_change(value)
