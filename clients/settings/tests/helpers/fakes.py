"""Hand-rolled collaborators shared by the settings tests."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Tuple

from settings_app.identity_client import IdentityServiceError
from settings_app.pid_state import IdentifierKind, SharedState


class FakeIdentityService:
    def __init__(self, url: Optional[str] = "https://is.example.org") -> None:
        self.url = url
        self.bound: Dict[IdentifierKind, List[Tuple[str, SharedState]]] = {
            IdentifierKind.EMAIL: [],
            IdentifierKind.PHONE: [],
        }
        self.calls: List[Tuple[str, object, object]] = []
        self.fail_list: Dict[IdentifierKind, Exception] = {}
        self.fail_bind: Optional[Exception] = None
        self.list_gates: Dict[IdentifierKind, asyncio.Event] = {}

    def get_identity_server_url(self) -> Optional[str]:
        return self.url

    async def set_identity_server(self, url: Optional[str]) -> None:
        self.calls.append(("set_identity_server", url, None))
        if url is not None and not url.startswith("http"):
            raise IdentityServiceError("invalid_url", f"not an identity server URL: {url!r}")
        self.url = url

    async def list_bound_identifiers(self, kind: IdentifierKind) -> List[Tuple[str, SharedState]]:
        self.calls.append(("list", kind, None))
        snapshot = list(self.bound[kind])
        gate = self.list_gates.get(kind)
        if gate is not None:
            await gate.wait()
        if kind in self.fail_list:
            raise self.fail_list[kind]
        return snapshot

    async def bind_identifier(self, kind: IdentifierKind, value: str) -> SharedState:
        self.calls.append(("bind", kind, value))
        if self.fail_bind is not None:
            raise self.fail_bind
        self._set(kind, value, SharedState.PENDING)
        return SharedState.PENDING

    async def unbind_identifier(self, kind: IdentifierKind, value: str) -> SharedState:
        self.calls.append(("unbind", kind, value))
        self._set(kind, value, SharedState.NOT_SHARED)
        return SharedState.NOT_SHARED

    def _set(self, kind: IdentifierKind, value: str, state: SharedState) -> None:
        self.bound[kind] = [(v, state if v == value else s) for v, s in self.bound[kind]]


class RecordingListener:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, tuple]] = []

    def on_select_identity_server(self) -> None:
        self.calls.append(("on_select_identity_server", ()))

    def on_change_identity_server(self) -> None:
        self.calls.append(("on_change_identity_server", ()))

    def on_set_identity_server(self, server: Optional[str]) -> None:
        self.calls.append(("on_set_identity_server", (server,)))

    def on_tap_share_email(self, email: str) -> None:
        self.calls.append(("on_tap_share_email", (email,)))

    def on_tap_revoke_email(self, email: str) -> None:
        self.calls.append(("on_tap_revoke_email", (email,)))

    def on_tap_share_pn(self, pn: str) -> None:
        self.calls.append(("on_tap_share_pn", (pn,)))

    def on_tap_revoke_pn(self, pn: str) -> None:
        self.calls.append(("on_tap_revoke_pn", (pn,)))
