"""
Configuration du client (Settings)
==================================

Rôle
----
- Centraliser les paramètres du client (URL du serveur de salles, fichier de session,
  délais des notifications et du compte à rebours, timeouts HTTP).
- Les valeurs par défaut conviennent pour un serveur de dev local (port 8080).
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services importent `from splendor_client.config.settings import settings`.

Exemples de `.env`
------------------
API_BASE="https://splendor.example.org"
SESSION_FILE="/home/me/.splendor/session.json"
NOTICE_TTL_SECONDS=6
"""
from typing import Tuple
from urllib.parse import urlencode, urlsplit, urlunsplit
import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Serveur de salles (REST + WebSocket /ws)
    API_BASE: str = "http://localhost:8080"

    # Persistance de l'identité (roomId, playerId, playerName)
    # Par défaut: <package>/data/session.json
    SESSION_FILE: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "session.json")
    SESSION_STORAGE_KEY: str = "splendor_session_v1"

    # Notifications éphémères et compte à rebours
    NOTICE_TTL_SECONDS: float = 4.5
    COUNTDOWN_TICK_SECONDS: float = 0.2
    EVENT_LOG_LIMIT: int = 120

    # Timeout HTTP (connect, read)
    HTTP_TIMEOUT: Tuple[float, float] = (5.0, 15.0)

    # Bornes de durée d'un tour à la création de salle
    TURN_SECONDS_MIN: int = 5
    TURN_SECONDS_MAX: int = 300
    TURN_SECONDS_DEFAULT: int = 30

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def build_ws_url(api_base: str, room_id: str, player_id: str) -> str:
    """Dérive l'URL du canal temps réel depuis l'URL HTTP (http→ws, https→wss)."""
    parts = urlsplit(api_base)
    scheme = "wss" if parts.scheme == "https" else "ws"
    query = urlencode({"roomId": room_id, "playerId": player_id})
    return urlunsplit((scheme, parts.netloc, "/ws", query, ""))


# Instance unique importable partout : `settings`
settings = Settings()
