"""Turn raw server error text into a short user-facing message.

Servers relaying errors from upstream components often prefix the useful part
with wrapper noise (``Error in processing chat stream: ``, exception class
names, a bare ``Error: ``). :func:`clean_error_message` strips those prefixes
in order, trims, and capitalizes the first letter.
"""
from __future__ import annotations

import re

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request"

_WRAPPER_PATTERNS = (
    re.compile(r"^Error in \w+ing \w+ stream: "),
    re.compile(r"^[A-Z][a-zA-Z]*(?:Error|Exception): "),
    re.compile(r"^Error: "),
)


def clean_error_message(message: str | None) -> str:
    """Strip known wrapper prefixes; empty input yields the generic message."""
    cleaned = (message or "").strip()
    for pattern in _WRAPPER_PATTERNS:
        cleaned = pattern.sub("", cleaned, count=1)
    cleaned = cleaned.strip()
    if not cleaned:
        return GENERIC_ERROR_MESSAGE
    return cleaned[0].upper() + cleaned[1:]


__all__ = ["GENERIC_ERROR_MESSAGE", "clean_error_message"]
