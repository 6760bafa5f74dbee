"""Persist the session's homeserver and identity-server binding."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

from settings_app.config import DEFAULT_STATE_PATH


@dataclass(frozen=True)
class SessionBinding:
    homeserver_url: str
    access_token: str
    identity_server_url: Optional[str] = None


def _atomic_write_json(path: Path, payload: Dict[str, object]) -> None:
    path = path.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    content = json.dumps(payload, indent=2, sort_keys=True)

    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


def load_binding(path: Path = DEFAULT_STATE_PATH) -> Optional[SessionBinding]:
    try:
        data = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, ValueError):
        return None

    if not isinstance(data, dict):
        return None
    try:
        homeserver_url = str(data["homeserver_url"])
        access_token = str(data["access_token"])
    except KeyError:
        return None
    identity_server_url = data.get("identity_server_url")
    if not isinstance(identity_server_url, str) or not identity_server_url.strip():
        identity_server_url = None
    return SessionBinding(
        homeserver_url=homeserver_url,
        access_token=access_token,
        identity_server_url=identity_server_url,
    )


def save_binding(binding: SessionBinding, path: Path = DEFAULT_STATE_PATH) -> None:
    _atomic_write_json(
        Path(path),
        {
            "homeserver_url": binding.homeserver_url,
            "access_token": binding.access_token,
            "identity_server_url": binding.identity_server_url,
        },
    )


def set_identity_server(identity_server_url: Optional[str], path: Path = DEFAULT_STATE_PATH) -> SessionBinding:
    """Update only the identity-server field of a stored binding."""

    current = load_binding(path)
    if current is None:
        raise FileNotFoundError(f"no session stored at {path}")
    updated = replace(current, identity_server_url=identity_server_url or None)
    save_binding(updated, path)
    return updated
