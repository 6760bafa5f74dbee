"""Pure transitions for the discovery settings screen."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from settings_app.async_result import LOADING, Failure, Success
from settings_app.discovery_state import (
    DiscoveryEvent,
    DiscoverySettingsState,
    EmailListFailed,
    EmailListLoaded,
    EmailListLoading,
    IdentityServerLoaded,
    PhoneListFailed,
    PhoneListLoaded,
    PhoneListLoading,
    ShareRequested,
    ToggleRequest,
)
from settings_app.pid_state import SharedState
from settings_app.redact import redact_identifier

logger = logging.getLogger(__name__)


def reduce(state: DiscoverySettingsState, event: DiscoveryEvent) -> DiscoverySettingsState:
    """Return the state that follows ``event``.

    Share and revoke requests never change local state: the identity server
    call happens outside and its outcome comes back as a list reload.
    """

    if isinstance(event, IdentityServerLoaded):
        return replace(state, identity_server_url=event.url)
    if isinstance(event, EmailListLoading):
        return replace(state, email_list=LOADING)
    if isinstance(event, PhoneListLoading):
        return replace(state, phone_number_list=LOADING)
    if isinstance(event, EmailListLoaded):
        return replace(state, email_list=Success(tuple(event.items)))
    if isinstance(event, PhoneListLoaded):
        return replace(state, phone_number_list=Success(tuple(event.items)))
    if isinstance(event, EmailListFailed):
        return replace(state, email_list=Failure(event.error))
    if isinstance(event, PhoneListFailed):
        return replace(state, phone_number_list=Failure(event.error))
    return state


def outbound_intent(state: DiscoverySettingsState, event: ToggleRequest) -> Optional[ToggleRequest]:
    """Return ``event`` if it should reach the identity server, else ``None``.

    The list may have been reloaded between render and tap, so the target is
    matched by value against the list currently loaded.
    """

    current = state.find(event.kind, event.value)
    if current is None:
        logger.debug("dropping %s for unknown identifier %s", type(event).__name__, redact_identifier(event.value))
        return None
    expected = SharedState.NOT_SHARED if isinstance(event, ShareRequested) else SharedState.SHARED
    if not current.is_toggleable or current.shared_state is not expected:
        logger.debug(
            "dropping %s for %s in state %s",
            type(event).__name__,
            redact_identifier(event.value),
            current.shared_state.value,
        )
        return None
    return event
