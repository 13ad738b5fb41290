"""
Utilitaires fichier pour la persistance locale du client (orjson).
- load_json_file(Path)  → contenu décodé, ou None si le fichier est absent
- save_json_file(Path, data) → remplacement atomique: fichier temporaire voisin puis os.replace,
  un arrêt brutal pendant l'écriture laisse l'ancien fichier intact
- remove_file(Path) → suppression tolérante (absent = OK)

`orjson.JSONDecodeError` remonte tel quel : le SessionStore décide quoi en faire.
"""
import os
import tempfile
from pathlib import Path
from typing import Any

import orjson


def load_json_file(path: Path) -> Any:
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return None
    return orjson.loads(raw)


def save_json_file(path: Path, data: Any) -> None:
    payload = orjson.dumps(data, option=orjson.OPT_INDENT_2)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        remove_file(Path(tmp_name))
        raise


def remove_file(path: Path) -> None:
    path.unlink(missing_ok=True)
