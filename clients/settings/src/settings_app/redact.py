"""Redaction helpers for safe settings diagnostics."""

from __future__ import annotations

import re
from typing import Any

SENSITIVE_KEYS = {
    "access_token",
    "recovery_key",
    "client_secret",
    "token",
    "password",
}

_KEY_VALUE_RE = re.compile(
    r"([\"']?(?:access_token|recovery_key|client_secret|token|password)[\"']?\s*[:=]\s*[\"']?)([^\"'\s,}&]+)",
    flags=re.IGNORECASE,
)
_BEARER_RE = re.compile(r"(Bearer\s+)([^\s]+)", flags=re.IGNORECASE)
_EMAIL_RE = re.compile(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*(@[A-Za-z0-9.-]+)")
_PHONE_RE = re.compile(r"\+?\d{6,}")


def redact_identifier(value: str) -> str:
    """Mask an email address or phone number, keeping enough to tell rows apart."""

    rendered = str(value)
    if "@" in rendered:
        local, _, domain = rendered.partition("@")
        return f"{local[:1]}***@{domain}"
    digits = "".join(ch for ch in rendered if ch.isdigit())
    if len(digits) <= 4:
        return "***"
    return f"***{digits[-2:]}"


def redact_text(text: str) -> str:
    """Redact tokens and contact identifiers from unstructured text."""

    rendered = str(text)
    rendered = _BEARER_RE.sub(r"\1[REDACTED]", rendered)
    rendered = _KEY_VALUE_RE.sub(r"\1[REDACTED]", rendered)
    rendered = _EMAIL_RE.sub(r"\1***\2", rendered)
    rendered = _PHONE_RE.sub(lambda match: redact_identifier(match.group(0)), rendered)
    return rendered


def redact_mapping(obj: dict[str, Any]) -> dict[str, Any]:
    """Deep redact mapping values for known sensitive keys."""

    redacted: dict[str, Any] = {}
    for key, value in obj.items():
        lower_key = str(key).lower()
        if lower_key in SENSITIVE_KEYS:
            redacted[key] = "[REDACTED]"
        elif isinstance(value, dict):
            redacted[key] = redact_mapping(value)
        elif isinstance(value, list):
            redacted[key] = [redact_mapping(item) if isinstance(item, dict) else item for item in value]
        else:
            redacted[key] = value
    return redacted
