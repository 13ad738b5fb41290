"""
Service: notifications.py
- File de notifications éphémères (échecs d'action, rejets serveur, rejets locaux).
- Chaque notice planifie sa propre suppression à l'insertion (TTL 4.5 s par défaut).
- dismiss(id) annule la suppression planifiée et retire la notice immédiatement.
- Pas de déduplication: deux textes identiques donnent deux notices indépendantes.

À appeler depuis la boucle asyncio (la suppression est une tâche de cette boucle).
"""
from __future__ import annotations

import asyncio
import itertools
from typing import Callable, Dict, List, Optional

from splendor_client.config.settings import settings
from splendor_client.models.session import Notification


class NotificationQueue:
    def __init__(self, ttl: Optional[float] = None, on_change: Optional[Callable[[], None]] = None) -> None:
        self.ttl = settings.NOTICE_TTL_SECONDS if ttl is None else ttl
        self.on_change = on_change
        self._ids = itertools.count()
        self._items: Dict[int, Notification] = {}
        self._expiry: Dict[int, asyncio.Task] = {}

    def items(self) -> List[Notification]:
        return list(self._items.values())

    def push(self, text: str) -> int:
        nid = next(self._ids)
        self._items[nid] = Notification(id=nid, text=text)
        self._expiry[nid] = asyncio.get_running_loop().create_task(self._expire(nid))
        self._changed()
        return nid

    def dismiss(self, nid: int) -> None:
        task = self._expiry.pop(nid, None)
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
        if self._items.pop(nid, None) is not None:
            self._changed()

    def clear(self) -> None:
        for nid in list(self._items):
            self.dismiss(nid)

    async def _expire(self, nid: int) -> None:
        try:
            await asyncio.sleep(self.ttl)
        except asyncio.CancelledError:
            return
        self.dismiss(nid)

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()
