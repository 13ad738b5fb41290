"""
Client Splendor — Point d'entrée console
========================================

Rôle
----
- Assemble le client (ClientState + ActionGateway + ConnectionManager) à partir de `settings`,
- Reprend la session persistée, ou rejoint / crée une salle selon les arguments,
- Affiche la ligne de statut à chaque changement (diagnostic, pas une UI).

Usage
-----
    python -m splendor_client.main                 # reprise de session
    python -m splendor_client.main --name Alice    # crée une salle
    python -m splendor_client.main --room ABCD --name Bob
"""
from __future__ import annotations

import argparse
import asyncio
from typing import Callable, List, Optional

from splendor_client.config.settings import settings
from splendor_client.services.action_gateway import ActionGateway, RoomApiClient
from splendor_client.services.client_state import ClientState
from splendor_client.services.connection_manager import ConnectionManager
from splendor_client.services.game_client import GameClient
from splendor_client.services.session_store import SessionStore


def build_client(api_base: Optional[str] = None, *, store: Optional[SessionStore] = None,
                 connector=None, http_session=None) -> GameClient:
    base = api_base or settings.API_BASE
    state = ClientState(store)
    gateway = ActionGateway(RoomApiClient(base, session=http_session))
    connection = ConnectionManager(state, connector=connector, api_base=base)
    return GameClient(state, gateway=gateway, connection=connection)


def status_printer(client: GameClient, out: Callable[[str], None] = print) -> Callable[[str], None]:
    """Observateur: imprime le statut et le compte à rebours quand ils changent."""
    state = client.state

    def _on_change(topic: str) -> None:
        if topic == "status":
            out(f"== {state.status_text}")
        elif topic == "countdown" and state.room and state.room.game:
            out(f"-- {state.current_player_name}: {state.countdown.value}s")

    return _on_change


async def run(client: GameClient, room: Optional[str] = None, name: Optional[str] = None,
              *, until: Optional[asyncio.Event] = None) -> bool:
    """Entre en salle puis reste à l'écoute jusqu'à `until` (ou Ctrl-C)."""
    if room and name:
        entered = await client.join_room(room, name)
    elif name:
        entered = await client.create_room(name, settings.TURN_SECONDS_DEFAULT)
    else:
        entered = await client.restore()
    try:
        if entered:
            await (until or asyncio.Event()).wait()
    finally:
        await client.close()
    return entered


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="splendor-client")
    parser.add_argument("--room", help="code ou id de la salle à rejoindre")
    parser.add_argument("--name", help="nom du joueur (crée une salle si --room est absent)")
    parser.add_argument("--api", default=settings.API_BASE)
    args = parser.parse_args(argv)

    client = build_client(args.api)
    client.state.subscribe(status_printer(client))
    print("== API ==", args.api)
    try:
        asyncio.run(run(client, args.room, args.name))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
