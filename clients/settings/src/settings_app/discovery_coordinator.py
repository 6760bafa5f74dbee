"""Owning coordinator for the discovery settings screen.

All reducer applications happen on the event loop thread. Identity-service
calls run as tasks and feed their outcome back in as events; a list load that
has been superseded by a newer load of the same list is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Protocol, Set

from settings_app.discovery_controller import DiscoveryController
from settings_app.discovery_reducer import outbound_intent, reduce
from settings_app.discovery_state import (
    DiscoveryEvent,
    DiscoverySettingsState,
    IdentityServerLoaded,
    RevokeRequested,
    ShareRequested,
    ToggleRequest,
    failed_event,
    loaded_event,
    loading_event,
)
from settings_app.identity_client import IdentityService
from settings_app.pid_state import IdentifierKind, build_pid_states
from settings_app.redact import redact_identifier, redact_text

logger = logging.getLogger(__name__)

StateObserver = Callable[[DiscoverySettingsState], None]


class IdentityServerNavigator(Protocol):
    def open_identity_server_details(self, url: Optional[str]) -> None: ...

    def open_identity_server_picker(self, url: Optional[str]) -> None: ...


class DiscoveryCoordinator:
    def __init__(
        self,
        identity_service: IdentityService,
        navigator: Optional[IdentityServerNavigator] = None,
    ) -> None:
        self.identity_service = identity_service
        self.navigator = navigator
        self.state = DiscoverySettingsState()
        self.last_action_error: Optional[Exception] = None
        self._observers: List[StateObserver] = []
        self._generations: Dict[IdentifierKind, int] = {kind: 0 for kind in IdentifierKind}
        self._tasks: Set[asyncio.Task] = set()

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        self._observers.append(observer)
        observer(self.state)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def attach(self, controller: DiscoveryController) -> Callable[[], None]:
        controller.listener = self
        return self.subscribe(controller.set_data)

    def dispatch(self, event: DiscoveryEvent) -> DiscoverySettingsState:
        new_state = reduce(self.state, event)
        if new_state != self.state:
            self.state = new_state
            for observer in list(self._observers):
                observer(new_state)
        return self.state

    async def refresh(self) -> None:
        """Reload the identity-server binding and, when bound, both lists."""

        self.dispatch(IdentityServerLoaded(self.identity_service.get_identity_server_url()))
        if not self.state.has_identity_server:
            return
        await asyncio.gather(
            self.load_list(IdentifierKind.EMAIL),
            self.load_list(IdentifierKind.PHONE),
        )

    async def load_list(self, kind: IdentifierKind) -> None:
        self._generations[kind] += 1
        generation = self._generations[kind]
        self.dispatch(loading_event(kind))
        try:
            entries = await self.identity_service.list_bound_identifiers(kind)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if generation != self._generations[kind]:
                return
            logger.warning("loading %s identifiers failed: %s", kind.value, redact_text(str(exc)))
            self.dispatch(failed_event(kind, exc))
            return
        if generation != self._generations[kind]:
            logger.debug("discarding superseded %s list load", kind.value)
            return
        self.dispatch(loaded_event(kind, build_pid_states(kind, entries)))

    async def request_toggle(self, event: ToggleRequest) -> bool:
        """Forward a share/revoke request to the identity service.

        Returns ``False`` when the request was dropped because the identifier
        is no longer in a toggleable state in the loaded list.
        """

        self.dispatch(event)
        forwarded = outbound_intent(self.state, event)
        if forwarded is None:
            return False
        self.last_action_error = None
        try:
            if isinstance(forwarded, ShareRequested):
                await self.identity_service.bind_identifier(forwarded.kind, forwarded.value)
            else:
                await self.identity_service.unbind_identifier(forwarded.kind, forwarded.value)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_action_error = exc
            logger.warning(
                "%s of %s failed: %s",
                "share" if isinstance(forwarded, ShareRequested) else "revoke",
                redact_identifier(forwarded.value),
                redact_text(str(exc)),
            )
        await self.load_list(forwarded.kind)
        return True

    async def set_identity_server(self, url: Optional[str]) -> None:
        self.last_action_error = None
        try:
            await self.identity_service.set_identity_server(url)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_action_error = exc
            logger.warning("changing identity server failed: %s", redact_text(str(exc)))
        await self.refresh()

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def on_select_identity_server(self) -> None:
        if self.navigator is not None:
            self.navigator.open_identity_server_details(self.state.identity_server_url)

    def on_change_identity_server(self) -> None:
        if self.navigator is not None:
            self.navigator.open_identity_server_picker(self.state.identity_server_url)

    def on_set_identity_server(self, server: Optional[str]) -> None:
        self._spawn(self.set_identity_server(server))

    def on_tap_share_email(self, email: str) -> None:
        self._spawn(self.request_toggle(ShareRequested(IdentifierKind.EMAIL, email)))

    def on_tap_revoke_email(self, email: str) -> None:
        self._spawn(self.request_toggle(RevokeRequested(IdentifierKind.EMAIL, email)))

    def on_tap_share_pn(self, pn: str) -> None:
        self._spawn(self.request_toggle(ShareRequested(IdentifierKind.PHONE, pn)))

    def on_tap_revoke_pn(self, pn: str) -> None:
        self._spawn(self.request_toggle(RevokeRequested(IdentifierKind.PHONE, pn)))
