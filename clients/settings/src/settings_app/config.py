from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_STATE_PATH = Path.home() / ".settings_app" / "session.json"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class ClientConfig:
    homeserver_url: str
    default_identity_server: str
    http_timeout_s: int
    default_region: str
    log_level: str
    state_path: Path


def _parse_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _parse_non_negative_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        parsed = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if parsed < 0:
        raise ValueError(f"{name} must be non-negative")
    return parsed


def _parse_log_level(name: str, default: str) -> str:
    level = _parse_str(name, default).upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ValueError(f"{name} must be a logging level name")
    return level


def _parse_region(name: str) -> str:
    region = _parse_str(name, "").upper()
    if region and (len(region) != 2 or not region.isalpha()):
        raise ValueError(f"{name} must be a two-letter region code")
    return region


def load_config_from_env() -> ClientConfig:
    return ClientConfig(
        homeserver_url=_parse_str("SETTINGS_APP_HOMESERVER_URL", "http://127.0.0.1:8788"),
        default_identity_server=_parse_str("SETTINGS_APP_DEFAULT_IDENTITY_SERVER", "https://vector.im"),
        http_timeout_s=max(1, _parse_non_negative_int("SETTINGS_APP_HTTP_TIMEOUT_S", 30)),
        default_region=_parse_region("SETTINGS_APP_DEFAULT_REGION"),
        log_level=_parse_log_level("SETTINGS_APP_LOG_LEVEL", "WARNING"),
        state_path=Path(_parse_str("SETTINGS_APP_STATE_PATH", str(DEFAULT_STATE_PATH))).expanduser(),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=_LOG_FORMAT)
    logging.getLogger("asyncio").setLevel(logging.ERROR)
