"""Display formatting for phone numbers stored as raw digits."""

from __future__ import annotations

from typing import Callable, Optional

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

from settings_app.pid_state import normalize_phone_value

PhoneFormatter = Callable[[str], str]


def format_international(raw_digits: str, region: Optional[str] = None) -> str:
    """Format ``raw_digits`` (country code included, no ``+``) for display.

    Never raises: input the parser rejects is shown as ``+digits``.
    """

    digits = normalize_phone_value(raw_digits)
    if not digits:
        return str(raw_digits)
    try:
        parsed = phonenumbers.parse(f"+{digits}", region or None)
    except NumberParseException:
        return f"+{digits}"
    return phonenumbers.format_number(parsed, PhoneNumberFormat.INTERNATIONAL)


def make_formatter(region: Optional[str] = None) -> PhoneFormatter:
    def _format(raw_digits: str) -> str:
        return format_international(raw_digits, region)

    return _format
