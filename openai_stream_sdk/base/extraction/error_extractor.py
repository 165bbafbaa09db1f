"""Best-effort ``(code, message)`` recovery from raw error payloads.

Purpose
-------
Error text reaching the SDK comes in many shapes: a proper API error envelope,
a flat ``{"message": ...}`` object, a bare ``{"error": "..."}``, a truncated
document, or an upstream error serialized as a string inside another JSON
document. :class:`ErrorPayloadExtractor` recovers the most useful message
from all of them.

Strategy (first layer producing a message wins)
-----------------------------------------------
1. JSON parse: ``error.message``, then ``message``, then ``error`` when it is
   a string. A list of strings is joined with newlines. The code comes from
   ``error.code`` then ``code``.
2. Pattern scan over the raw text for every ``"message":`` and
   ``\\"message\\":`` value (see :mod:`.quote_scanner`). Values starting with
   ``ConnectionError:`` are wrapper noise and skipped. The remaining
   candidates go through a :data:`MessageSelector`; the default
   :func:`shortest_message` picks the shortest non-empty one because outer
   wrappers usually restate the inner root cause with extra prefix text.
3. The code is recovered with a tolerant numeric ``"code":`` scan.

A code without any message yields ``ExtractedError(code, raw_text)``. When
nothing message-like exists the result is ``None``. ``extract`` never raises
and never rewrites the selected message; user-facing cleanup lives in
:mod:`.message_cleanup`.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from .quote_scanner import extract_numeric_field, extract_string_field

MessageSelector = Callable[[Sequence[str]], Optional[str]]

_SKIPPED_PREFIXES = ("ConnectionError:",)


@dataclass(frozen=True)
class ExtractedError:
    """Code and message recovered from an error payload."""

    code: Optional[str]
    message: str


def shortest_message(candidates: Sequence[str]) -> Optional[str]:
    """Pick the shortest non-empty candidate (earliest wins ties)."""
    non_empty = [c for c in candidates if c]
    if not non_empty:
        return None
    return min(non_empty, key=len)


def first_message(candidates: Sequence[str]) -> Optional[str]:
    """Pick the first non-empty candidate in document order."""
    return next((c for c in candidates if c), None)


def _as_message(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        return "\n".join(value) or None
    return None


def _as_code(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, str)):
        text = str(value)
        return text or None
    return None


class ErrorPayloadExtractor:
    """Layered error extractor with a pluggable candidate selection policy."""

    def __init__(self, selector: MessageSelector = shortest_message) -> None:
        self._selector = selector

    def extract(self, raw_text: str) -> Optional[ExtractedError]:
        """Return the best ``(code, message)`` for ``raw_text`` or ``None``."""
        if not raw_text or not raw_text.strip():
            return None
        code: Optional[str] = None
        try:
            parsed = json.loads(raw_text)
        except (ValueError, RecursionError):
            parsed = None
        if isinstance(parsed, dict):
            found = self._from_json(parsed)
            if found.message:
                return found
            code = found.code

        message = self._scan_messages(raw_text)
        if code is None:
            code = extract_numeric_field(raw_text, "code")
        if message:
            return ExtractedError(code=code, message=message)
        if code is not None:
            return ExtractedError(code=code, message=raw_text)
        return None

    def message_or_raw(self, raw_text: str) -> str:
        """Extracted message, falling back to the stripped raw text."""
        found = self.extract(raw_text)
        return found.message if found is not None else raw_text.strip()

    @staticmethod
    def _from_json(obj: dict) -> ExtractedError:
        err = obj.get("error")
        message: Optional[str] = None
        code: Optional[str] = None
        if isinstance(err, dict):
            message = _as_message(err.get("message"))
            code = _as_code(err.get("code"))
        if message is None:
            message = _as_message(obj.get("message"))
        if message is None:
            message = _as_message(err) if isinstance(err, str) else None
        if code is None:
            code = _as_code(obj.get("code"))
        return ExtractedError(code=code, message=message or "")

    def _scan_messages(self, raw_text: str) -> Optional[str]:
        candidates = [
            value
            for value in extract_string_field(raw_text, "message")
            if not value.startswith(_SKIPPED_PREFIXES)
        ]
        # Selectors are user supplied; a failing one degrades to "no message".
        try:
            return self._selector(candidates)
        except Exception:  # noqa: BLE001
            return None


_DEFAULT_EXTRACTOR = ErrorPayloadExtractor()


def extract_error(raw_text: str) -> Optional[ExtractedError]:
    """Module-level shortcut using the default (shortest message) policy."""
    return _DEFAULT_EXTRACTOR.extract(raw_text)


__all__ = [
    "ExtractedError",
    "ErrorPayloadExtractor",
    "MessageSelector",
    "shortest_message",
    "first_message",
    "extract_error",
]
