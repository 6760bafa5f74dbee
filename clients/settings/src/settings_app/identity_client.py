"""aiohttp client for the homeserver's third-party identifier endpoints."""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.parse
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

import aiohttp

from settings_app import session_store
from settings_app.config import DEFAULT_STATE_PATH
from settings_app.pid_state import IdentifierKind, SharedState, normalize_phone_value, parse_shared_state
from settings_app.redact import redact_identifier, redact_mapping, redact_text

logger = logging.getLogger(__name__)

THREEPID_PATH = "/_matrix/client/r0/account/3pid"
BIND_PATH = "/_matrix/client/r0/account/3pid/bind"
UNBIND_PATH = "/_matrix/client/r0/account/3pid/unbind"


class IdentityServiceError(Exception):
    def __init__(self, code: str, message: str = "", *, status: Optional[int] = None):
        self.code = code
        self.status = status
        super().__init__(message or code)


class IdentityService(Protocol):
    def get_identity_server_url(self) -> Optional[str]: ...

    async def set_identity_server(self, url: Optional[str]) -> None: ...

    async def bind_identifier(self, kind: IdentifierKind, value: str) -> SharedState: ...

    async def unbind_identifier(self, kind: IdentifierKind, value: str) -> SharedState: ...

    async def list_bound_identifiers(self, kind: IdentifierKind) -> Sequence[Tuple[str, SharedState]]: ...


def _build_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}{path}"


def validate_identity_server_url(url: str) -> str:
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    parsed = urllib.parse.urlparse(candidate)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise IdentityServiceError("invalid_url", f"not an identity server URL: {url!r}")
    return candidate.rstrip("/")


def _id_server_host(url: str) -> str:
    return urllib.parse.urlparse(url).netloc


def _entry_shared_state(entry: Dict[str, object]) -> SharedState:
    if "state" in entry:
        return parse_shared_state(entry["state"])
    if entry.get("pending") is True:
        return SharedState.PENDING
    bound = entry.get("bound")
    if isinstance(bound, bool):
        return SharedState.SHARED if bound else SharedState.NOT_SHARED
    return SharedState.UNKNOWN


class HttpIdentityService:
    """Identity-server binding backed by a stored session and the homeserver API."""

    def __init__(
        self,
        binding: session_store.SessionBinding,
        *,
        state_path: Path = DEFAULT_STATE_PATH,
        timeout_s: int = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.binding = binding
        self.state_path = Path(state_path)
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "HttpIdentityService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _client(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def get_identity_server_url(self) -> Optional[str]:
        return self.binding.identity_server_url

    async def set_identity_server(self, url: Optional[str]) -> None:
        validated = validate_identity_server_url(url) if url and url.strip() else None
        self.binding = session_store.set_identity_server(validated, self.state_path)
        logger.info("identity server %s", "set" if validated else "cleared")

    async def list_bound_identifiers(self, kind: IdentifierKind) -> List[Tuple[str, SharedState]]:
        self._require_identity_server()
        payload = await self._request("GET", THREEPID_PATH)
        threepids = payload.get("threepids", [])
        if not isinstance(threepids, list):
            raise IdentityServiceError("bad_response", "threepids must be a list")
        entries: List[Tuple[str, SharedState]] = []
        for entry in threepids:
            if not isinstance(entry, dict) or entry.get("medium") != kind.value:
                continue
            address = str(entry.get("address", ""))
            if kind is IdentifierKind.PHONE:
                address = normalize_phone_value(address)
            if address:
                entries.append((address, _entry_shared_state(entry)))
        return entries

    async def bind_identifier(self, kind: IdentifierKind, value: str) -> SharedState:
        return await self._change_binding(BIND_PATH, kind, value, SharedState.PENDING)

    async def unbind_identifier(self, kind: IdentifierKind, value: str) -> SharedState:
        return await self._change_binding(UNBIND_PATH, kind, value, SharedState.NOT_SHARED)

    async def _change_binding(
        self,
        path: str,
        kind: IdentifierKind,
        value: str,
        default_state: SharedState,
    ) -> SharedState:
        identity_server = self._require_identity_server()
        body = {"medium": kind.value, "address": value, "id_server": _id_server_host(identity_server)}
        logger.debug("POST %s medium=%s address=%s", path, kind.value, redact_identifier(value))
        payload = await self._request("POST", path, body)
        if "state" in payload:
            return parse_shared_state(payload["state"])
        return default_state

    def _require_identity_server(self) -> str:
        url = self.binding.identity_server_url
        if not url:
            raise IdentityServiceError("no_identity_server", "no identity server configured")
        return url

    async def _request(self, method: str, path: str, body: Optional[Dict[str, object]] = None) -> Dict[str, object]:
        url = _build_url(self.binding.homeserver_url, path)
        headers = {"Authorization": f"Bearer {self.binding.access_token}"}
        try:
            async with self._client().request(method, url, json=body, headers=headers) as response:
                raw = await response.text()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise IdentityServiceError("network_error", redact_text(str(exc))) from exc

        try:
            payload = json.loads(raw) if raw else {}
        except json.JSONDecodeError as exc:
            raise IdentityServiceError("bad_response", "response is not JSON", status=status) from exc
        if not isinstance(payload, dict):
            raise IdentityServiceError("bad_response", "response must be a JSON object", status=status)
        if status >= 400:
            logger.warning("%s %s failed status=%s body=%s", method, path, status, redact_mapping(payload))
            raise IdentityServiceError(
                str(payload.get("errcode") or f"http_{status}"),
                redact_text(str(payload.get("error") or f"HTTP {status}")),
                status=status,
            )
        return payload
