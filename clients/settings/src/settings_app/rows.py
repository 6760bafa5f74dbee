"""Typed row descriptors produced by the settings screen renderers.

Rows are plain immutable data. Each carries a stable ``id`` used to diff one
render against the next; interactive rows name the intent they raise rather
than holding callbacks, so two renders of the same state compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class ButtonStyle(str, Enum):
    POSITIVE = "positive"
    DESTRUCTIVE = "destructive"


class ButtonType(str, Enum):
    NORMAL = "normal"
    SWITCH = "switch"


@dataclass(frozen=True)
class Intent:
    """A listener call a row raises: method name plus its positional args."""

    name: str
    args: Tuple[Optional[str], ...] = ()


@dataclass(frozen=True)
class SectionTitleRow:
    id: str
    title: str


@dataclass(frozen=True)
class SettingsRow:
    id: str
    description: str
    on_click: Optional[Intent] = None


@dataclass(frozen=True)
class InfoRow:
    id: str
    helper_text: str


@dataclass(frozen=True)
class ButtonRow:
    id: str
    button_title: str
    style: ButtonStyle
    on_click: Intent


@dataclass(frozen=True)
class LoadingRow:
    id: str
    loading_text: Optional[str] = None


@dataclass(frozen=True)
class TextButtonRow:
    """One email or phone number with its sharing affordance."""

    id: str
    title: str
    button_type: ButtonType = ButtonType.NORMAL
    indeterminate: bool = False
    checked: bool = False
    button_title: Optional[str] = None
    info_message: Optional[str] = None
    on_check: Optional[Intent] = None
    on_uncheck: Optional[Intent] = None

    @property
    def is_interactive(self) -> bool:
        return self.on_check is not None or self.on_uncheck is not None


Row = Union[SectionTitleRow, SettingsRow, InfoRow, ButtonRow, LoadingRow, TextButtonRow]
