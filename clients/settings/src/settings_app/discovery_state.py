"""Discovery settings screen state and the events that change it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from settings_app.async_result import UNINITIALIZED, AsyncResult, value_or_none
from settings_app.pid_state import IdentifierKind, PidState

PidList = Tuple[PidState, ...]


@dataclass(frozen=True)
class DiscoverySettingsState:
    identity_server_url: Optional[str] = None
    email_list: AsyncResult[PidList] = field(default=UNINITIALIZED)
    phone_number_list: AsyncResult[PidList] = field(default=UNINITIALIZED)

    @property
    def has_identity_server(self) -> bool:
        return bool(self.identity_server_url and self.identity_server_url.strip())

    def list_for(self, kind: IdentifierKind) -> AsyncResult[PidList]:
        if kind is IdentifierKind.EMAIL:
            return self.email_list
        return self.phone_number_list

    def find(self, kind: IdentifierKind, value: str) -> Optional[PidState]:
        """Look up a loaded identifier by value; ``None`` if absent or not loaded."""

        items = value_or_none(self.list_for(kind)) or ()
        for item in items:
            if item.value == value:
                return item
        return None


@dataclass(frozen=True)
class IdentityServerLoaded:
    url: Optional[str]


@dataclass(frozen=True)
class EmailListLoading:
    pass


@dataclass(frozen=True)
class PhoneListLoading:
    pass


@dataclass(frozen=True)
class EmailListLoaded:
    items: Sequence[PidState]


@dataclass(frozen=True)
class PhoneListLoaded:
    items: Sequence[PidState]


@dataclass(frozen=True)
class EmailListFailed:
    error: BaseException


@dataclass(frozen=True)
class PhoneListFailed:
    error: BaseException


@dataclass(frozen=True)
class ShareRequested:
    kind: IdentifierKind
    value: str


@dataclass(frozen=True)
class RevokeRequested:
    kind: IdentifierKind
    value: str


ToggleRequest = Union[ShareRequested, RevokeRequested]

DiscoveryEvent = Union[
    IdentityServerLoaded,
    EmailListLoading,
    PhoneListLoading,
    EmailListLoaded,
    PhoneListLoaded,
    EmailListFailed,
    PhoneListFailed,
    ShareRequested,
    RevokeRequested,
]


def loading_event(kind: IdentifierKind) -> DiscoveryEvent:
    return EmailListLoading() if kind is IdentifierKind.EMAIL else PhoneListLoading()


def loaded_event(kind: IdentifierKind, items: Sequence[PidState]) -> DiscoveryEvent:
    if kind is IdentifierKind.EMAIL:
        return EmailListLoaded(tuple(items))
    return PhoneListLoaded(tuple(items))


def failed_event(kind: IdentifierKind, error: BaseException) -> DiscoveryEvent:
    return EmailListFailed(error) if kind is IdentifierKind.EMAIL else PhoneListFailed(error)
