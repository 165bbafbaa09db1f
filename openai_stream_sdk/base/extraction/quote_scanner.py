"""Quote-aware scanning helpers for incomplete JSON text.

Purpose
-------
Error payloads seen mid-stream are frequently cut off, or are JSON documents
embedded as strings inside other JSON documents (so their quotes appear as
``\\"``). ``json.loads`` cannot help with either case. The helpers here locate
a key such as ``"message"`` in raw text, pull out the properly terminated
quoted value that follows it and un-escape that value, without requiring the
surrounding document to be complete.

Design
------
- Both quoting levels are recognized: ``"message":`` and the escape-doubled
  ``\\"message\\":`` form from nested JSON-in-JSON.
- A value counts only when its closing quote is present; a value truncated
  mid-string yields ``None`` rather than a partial string.
- Backslash runs decide whether a quote terminates a value: at the plain
  level an even run before ``"`` leaves it unescaped, at the escaped level
  the closing ``\\"`` is preceded by a run of length ``4k + 1``.
- :func:`looks_truncated` is a bracket-balance check used by the stream
  interpreter to tell "not finished yet" apart from "broken".

All functions are pure and never raise on arbitrary input.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional, Tuple

_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


@lru_cache(maxsize=32)
def _field_pattern(key: str) -> "re.Pattern[str]":
    k = re.escape(key)
    return re.compile(rf'\\"{k}\\"\s*:|"{k}"\s*:')


def find_field(text: str, key: str, start: int = 0) -> Optional[Tuple[int, int, bool]]:
    """Locate the next ``"key":`` (or ``\\"key\\":``) at or after ``start``.

    Returns ``(match_start, value_start, escaped)`` where ``value_start`` is
    the index just past the colon and ``escaped`` tells whether the key used
    the escape-doubled quoting. ``None`` when no further occurrence exists.
    """
    m = _field_pattern(key).search(text, start)
    if m is None:
        return None
    return m.start(), m.end(), m.group(0).startswith("\\")


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t\r\n":
        pos += 1
    return pos


def _find_closing_quote(text: str, pos: int, escaped: bool) -> Optional[int]:
    n = len(text)
    i = pos
    while i < n:
        ch = text[i]
        if ch == "\\":
            run_start = i
            while i < n and text[i] == "\\":
                i += 1
            run = i - run_start
            if i < n and text[i] == '"':
                if escaped and run % 4 == 1:
                    return i - 1
                if not escaped and run % 2 == 0:
                    return i
                i += 1
            continue
        if ch == '"' and not escaped:
            return i
        i += 1
    return None


def extract_quoted_value(text: str, pos: int) -> Optional[Tuple[str, int, bool]]:
    """Extract the quoted string value starting at ``pos`` (whitespace skipped).

    Returns ``(raw_value, end, escaped)``: the still-escaped value text, the
    index just past its closing quote, and the quoting level. ``None`` when
    no quote opens at ``pos`` or the value is unterminated.
    """
    pos = _skip_ws(text, pos)
    if text.startswith('\\"', pos):
        escaped, content_start = True, pos + 2
    elif text.startswith('"', pos):
        escaped, content_start = False, pos + 1
    else:
        return None
    close = _find_closing_quote(text, content_start, escaped)
    if close is None:
        return None
    end = close + (2 if escaped else 1)
    return text[content_start:close], end, escaped


def _unescape_once(value: str) -> str:
    out = []
    i = 0
    n = len(value)
    while i < n:
        ch = value[i]
        if ch != "\\" or i + 1 >= n:
            out.append(ch)
            i += 1
            continue
        nxt = value[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
            continue
        if nxt == "u" and i + 6 <= n:
            hex_digits = value[i + 2 : i + 6]
            try:
                out.append(chr(int(hex_digits, 16)))
                i += 6
                continue
            except ValueError:
                pass
        # unknown escape: keep verbatim
        out.append(ch)
        i += 1
    return "".join(out)


def unescape_json_string(value: str, *, escaped: bool = False) -> str:
    """Undo JSON string escapes; twice when the value came from nested JSON."""
    if escaped:
        value = _unescape_once(value)
    return _unescape_once(value)


def extract_string_field(text: str, key: str) -> list[str]:
    """Return every terminated string value for ``key`` in ``text``, unescaped.

    Occurrences whose value is not a string (numbers, objects) or is
    truncated are skipped.
    """
    values: list[str] = []
    pos = 0
    while True:
        found = find_field(text, key, pos)
        if found is None:
            break
        _, value_start, _ = found
        quoted = extract_quoted_value(text, value_start)
        if quoted is None:
            pos = value_start
            continue
        raw, end, escaped = quoted
        values.append(unescape_json_string(raw, escaped=escaped))
        pos = end
    return values


def extract_numeric_field(text: str, key: str = "code") -> Optional[str]:
    """Return the digits of the first numeric ``key`` value, as a string."""
    found = find_field(text, key)
    while found is not None:
        _, value_start, _ = found
        pos = _skip_ws(text, value_start)
        end = pos
        while end < len(text) and text[end].isdigit():
            end += 1
        if end > pos:
            return text[pos:end]
        found = find_field(text, key, value_start)
    return None


def looks_truncated(text: str) -> bool:
    """Report whether ``text`` reads like a JSON container cut off early.

    True when the text opens with ``{`` or ``[`` and ends inside a string or
    with brackets still unclosed. A closing bracket that does not match, or
    any content after the outer container closes, means the text is broken
    rather than unfinished, and yields False.
    """
    start = _skip_ws(text, 0)
    if start >= len(text) or text[start] not in "{[":
        return False
    stack: list[str] = []
    in_string = False
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "{[":
            stack.append("}" if ch == "{" else "]")
        elif ch in "}]":
            if not stack or stack.pop() != ch:
                return False
            if not stack:
                return False
        i += 1
    return in_string or bool(stack)


__all__ = [
    "find_field",
    "extract_quoted_value",
    "unescape_json_string",
    "extract_string_field",
    "extract_numeric_field",
    "looks_truncated",
]
