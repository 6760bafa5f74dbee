"""Plain-text rendering of settings rows for terminal output."""

from __future__ import annotations

from typing import Iterable, List

from settings_app.rows import (
    ButtonRow,
    ButtonStyle,
    ButtonType,
    InfoRow,
    LoadingRow,
    Row,
    SectionTitleRow,
    SettingsRow,
    TextButtonRow,
)

SPINNER = "…"


def loading_label(row: LoadingRow) -> str:
    # The loading text is optional; without it only the spinner shows.
    if row.loading_text:
        return f"{SPINNER} {row.loading_text}"
    return SPINNER


def _format_text_button(row: TextButtonRow) -> str:
    if row.indeterminate:
        return f"  {row.title}  [?]"
    if row.button_type is ButtonType.SWITCH:
        mark = "[x]" if row.checked else "[ ]"
        return f"  {row.title}  {mark}"
    line = f"  {row.title}  ({row.button_title or ''})"
    if row.info_message:
        line += f"\n    {row.info_message}"
    return line


def format_row(row: Row) -> str:
    if isinstance(row, SectionTitleRow):
        return f"== {row.title} =="
    if isinstance(row, SettingsRow):
        return f"  {row.description}"
    if isinstance(row, InfoRow):
        return f"  {row.helper_text}"
    if isinstance(row, ButtonRow):
        marker = "!" if row.style is ButtonStyle.DESTRUCTIVE else ">"
        return f"  {marker} {row.button_title}"
    if isinstance(row, LoadingRow):
        return f"  {loading_label(row)}"
    if isinstance(row, TextButtonRow):
        return _format_text_button(row)
    return ""


def format_rows(rows: Iterable[Row]) -> List[str]:
    lines: List[str] = []
    for row in rows:
        lines.extend(format_row(row).splitlines())
    return lines
