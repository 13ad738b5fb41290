"""
Session store
=============

Persiste l'identité locale (roomId, playerId, playerName) entre deux lancements du client.

Stockage:
- un fichier JSON (`settings.SESSION_FILE`) contenant une seule clé
  (`settings.SESSION_STORAGE_KEY`) → triplet sérialisé.

Contrat:
- load()  → Session | None ; ne lève JAMAIS (fichier absent, JSON cassé, forme invalide → None).
- save(Session) ; clear().
"""
from __future__ import annotations

import logging
from pathlib import Path
from threading import RLock
from typing import Optional

import orjson
from pydantic import ValidationError

from splendor_client.config.settings import settings
from splendor_client.models.session import Session
from splendor_client.utils.io_utils import load_json_file, remove_file, save_json_file

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, path: Optional[Path] = None, key: Optional[str] = None) -> None:
        self.path = Path(path or settings.SESSION_FILE)
        self.key = key or settings.SESSION_STORAGE_KEY
        self._lock = RLock()

    def load(self) -> Optional[Session]:
        """Relit la session persistée; None si absente ou illisible (visiteur "neuf")."""
        with self._lock:
            try:
                data = load_json_file(self.path)
            except (OSError, orjson.JSONDecodeError):
                logger.warning("Malformed session storage ignored", extra={"session_file": str(self.path)})
                return None

        if not isinstance(data, dict):
            return None
        raw = data.get(self.key)
        if not isinstance(raw, dict):
            return None
        try:
            return Session.model_validate(raw)
        except ValidationError:
            logger.warning("Invalid stored session ignored", extra={"session_file": str(self.path)})
            return None

    def save(self, session: Session) -> None:
        with self._lock:
            save_json_file(self.path, {self.key: session.to_wire()})

    def clear(self) -> None:
        with self._lock:
            remove_file(self.path)
