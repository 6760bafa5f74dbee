"""Per-identifier sharing state for the discovery settings screen."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class IdentifierKind(str, Enum):
    EMAIL = "email"
    PHONE = "msisdn"


class SharedState(str, Enum):
    """Sharing status of one identifier on the identity server.

    ``UNKNOWN`` means the server has not confirmed either way yet and is
    rendered as an indeterminate control.
    """

    UNKNOWN = "unknown"
    SHARED = "shared"
    NOT_SHARED = "not_shared"
    PENDING = "pending"


def parse_shared_state(raw: object) -> SharedState:
    if isinstance(raw, SharedState):
        return raw
    try:
        return SharedState(str(raw).lower())
    except ValueError:
        return SharedState.UNKNOWN


@dataclass(frozen=True)
class PidState:
    value: str
    kind: IdentifierKind
    shared_state: SharedState = SharedState.UNKNOWN

    @property
    def is_toggleable(self) -> bool:
        return self.shared_state in (SharedState.SHARED, SharedState.NOT_SHARED)


def normalize_phone_value(raw: str) -> str:
    """Reduce a phone number to the raw digit form used as its identifier."""

    return "".join(ch for ch in str(raw) if ch.isdigit())


def build_pid_states(kind: IdentifierKind, entries) -> tuple[PidState, ...]:
    """Build PidStates from ``(value, shared_state)`` pairs in server order."""

    states = []
    for value, shared_state in entries:
        raw = normalize_phone_value(value) if kind is IdentifierKind.PHONE else str(value)
        if not raw:
            continue
        states.append(PidState(value=raw, kind=kind, shared_state=parse_shared_state(shared_state)))
    return tuple(states)
