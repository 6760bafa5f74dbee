"""Render the discovery settings state into rows and route row interactions."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from settings_app import strings
from settings_app.async_result import Failure, Loading, Success, Uninitialized
from settings_app.discovery_state import DiscoverySettingsState
from settings_app.phone_format import PhoneFormatter, format_international
from settings_app.pid_state import IdentifierKind, PidState, SharedState
from settings_app.redact import redact_text
from settings_app.rows import (
    ButtonRow,
    ButtonStyle,
    ButtonType,
    InfoRow,
    Intent,
    LoadingRow,
    Row,
    SectionTitleRow,
    SettingsRow,
    TextButtonRow,
)

logger = logging.getLogger(__name__)


class InteractionListener(Protocol):
    def on_select_identity_server(self) -> None: ...

    def on_change_identity_server(self) -> None: ...

    def on_set_identity_server(self, server: Optional[str]) -> None: ...

    def on_tap_share_email(self, email: str) -> None: ...

    def on_tap_revoke_email(self, email: str) -> None: ...

    def on_tap_share_pn(self, pn: str) -> None: ...

    def on_tap_revoke_pn(self, pn: str) -> None: ...


_SECTION_IDS = {
    IdentifierKind.EMAIL: {
        "title": "emails",
        "loading": "emailLoading",
        "empty": "no_emails",
        "error": "emailsError",
    },
    IdentifierKind.PHONE: {
        "title": "pns",
        "loading": "phoneLoading",
        "empty": "no_pns",
        "error": "pnsError",
    },
}

_SECTION_TEXT = {
    IdentifierKind.EMAIL: (strings.EMAILS_TITLE, strings.NO_EMAILS, strings.EMAILS_LOAD_FAILED),
    IdentifierKind.PHONE: (strings.PHONES_TITLE, strings.NO_PHONES, strings.PHONES_LOAD_FAILED),
}

_SHARE_INTENTS = {
    IdentifierKind.EMAIL: ("on_tap_share_email", "on_tap_revoke_email"),
    IdentifierKind.PHONE: ("on_tap_share_pn", "on_tap_revoke_pn"),
}


def build_rows(
    state: Optional[DiscoverySettingsState],
    format_phone: PhoneFormatter = format_international,
) -> List[Row]:
    """Project ``state`` into the ordered row list for the discovery screen."""

    if state is None:
        return []
    rows: List[Row] = []
    rows.extend(_identity_server_section(state))
    if state.has_identity_server:
        rows.extend(_identifier_section(state, IdentifierKind.EMAIL, format_phone))
        rows.extend(_identifier_section(state, IdentifierKind.PHONE, format_phone))
    return rows


def _identity_server_section(state: DiscoverySettingsState) -> List[Row]:
    server = state.identity_server_url if state.has_identity_server else None
    shown = server or strings.NONE
    rows: List[Row] = [
        SectionTitleRow(id="idsTitle", title=strings.IDENTITY_SERVER),
        SettingsRow(id="idServer", description=shown, on_click=Intent("on_select_identity_server")),
        InfoRow(id="idServerFooter", helper_text=strings.IDENTITY_SERVER_INFO.format(server=shown)),
        ButtonRow(
            id="change",
            button_title=strings.ACTION_CHANGE,
            style=ButtonStyle.POSITIVE,
            on_click=Intent("on_change_identity_server"),
        ),
    ]
    if server is not None:
        rows.append(InfoRow(id="removeInfo", helper_text=strings.DISCONNECT_IDENTITY_SERVER_INFO))
        rows.append(
            ButtonRow(
                id="remove",
                button_title=strings.ACTION_DISCONNECT,
                style=ButtonStyle.DESTRUCTIVE,
                on_click=Intent("on_set_identity_server", (None,)),
            )
        )
    return rows


def _identifier_section(
    state: DiscoverySettingsState,
    kind: IdentifierKind,
    format_phone: PhoneFormatter,
) -> List[Row]:
    ids = _SECTION_IDS[kind]
    title, empty_text, error_text = _SECTION_TEXT[kind]
    rows: List[Row] = [SectionTitleRow(id=ids["title"], title=title)]
    result = state.list_for(kind)
    if isinstance(result, Uninitialized):
        return rows
    if isinstance(result, Loading):
        rows.append(LoadingRow(id=ids["loading"]))
        return rows
    if isinstance(result, Failure):
        message = redact_text(str(result.error) or type(result.error).__name__)
        rows.append(InfoRow(id=ids["error"], helper_text=error_text.format(error=message)))
        return rows
    if isinstance(result, Success):
        if not result.value:
            rows.append(InfoRow(id=ids["empty"], helper_text=empty_text))
            return rows
        for pid in result.value:
            rows.append(_pid_row(pid, format_phone))
        return rows
    logger.warning("unexpected %s list result %r", kind.value, type(result).__name__)
    return rows


def _pid_row(pid: PidState, format_phone: PhoneFormatter) -> TextButtonRow:
    if pid.kind is IdentifierKind.PHONE:
        title = format_phone(pid.value)
    else:
        title = pid.value
    share_name, revoke_name = _SHARE_INTENTS[pid.kind]

    if pid.shared_state is SharedState.UNKNOWN:
        return TextButtonRow(id=pid.value, title=title, indeterminate=True)
    if pid.shared_state is SharedState.PENDING:
        return TextButtonRow(
            id=pid.value,
            title=title,
            button_type=ButtonType.NORMAL,
            button_title=strings.PENDING,
            info_message=strings.CONFIRM_PENDING,
        )
    return TextButtonRow(
        id=pid.value,
        title=title,
        button_type=ButtonType.SWITCH,
        checked=pid.shared_state is SharedState.SHARED,
        on_check=Intent(share_name, (pid.value,)),
        on_uncheck=Intent(revoke_name, (pid.value,)),
    )


class DiscoveryController:
    """Keeps the last rendered rows and turns row interactions into listener calls."""

    def __init__(
        self,
        listener: Optional[InteractionListener] = None,
        format_phone: PhoneFormatter = format_international,
    ) -> None:
        self.listener = listener
        self.format_phone = format_phone
        self.state: Optional[DiscoverySettingsState] = None
        self.rows: List[Row] = []

    def set_data(self, state: Optional[DiscoverySettingsState]) -> List[Row]:
        self.state = state
        self.rows = build_rows(state, self.format_phone)
        return self.rows

    def find_row(self, row_id: str) -> Optional[Row]:
        for row in self.rows:
            if row.id == row_id:
                return row
        return None

    def click(self, row_id: str) -> bool:
        row = self.find_row(row_id)
        if isinstance(row, (SettingsRow, ButtonRow)) and row.on_click is not None:
            return self._emit(row.on_click)
        return False

    def toggle(self, row_id: str, checked: bool) -> bool:
        row = self.find_row(row_id)
        if not isinstance(row, TextButtonRow) or row.button_type is not ButtonType.SWITCH:
            return False
        if row.checked == checked:
            return False
        return self._emit(row.on_check if checked else row.on_uncheck)

    def _emit(self, intent: Optional[Intent]) -> bool:
        if intent is None or self.listener is None:
            return False
        handler = getattr(self.listener, intent.name)
        handler(*intent.args)
        return True
