"""Owned text buffer for one response stream.

:class:`PendingBuffer` turns arriving byte chunks into complete text lines.
It owns the incremental UTF-8 decoder (so a code point split across two
chunks is reassembled) and the unterminated tail of the current line. One
instance belongs to exactly one :class:`SSEStreamInterpreter`; nothing else
holds a reference to it.

Line terminators are ``\\r\\n``, ``\\n`` and ``\\r``. A trailing ``\\r`` is held
back until the next chunk shows whether a ``\\n`` follows, so a CRLF pair
split across chunks never produces a spurious blank line.
"""
from __future__ import annotations

import codecs
import re
from typing import List

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


class PendingBuffer:
    """Incremental decoder plus unterminated line tail."""

    __slots__ = ("_decoder", "_text")

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
        self._text = ""

    @property
    def tail(self) -> str:
        """Text received after the last complete line."""
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def feed(self, chunk: bytes) -> None:
        """Decode ``chunk`` and append it.

        Raises ``UnicodeDecodeError`` when the chunk is not valid UTF-8; the
        chunk is then dropped and the decoder restarts clean.
        """
        try:
            text = self._decoder.decode(chunk)
        except UnicodeDecodeError:
            self._decoder.reset()
            raise
        self._text += text

    def take_lines(self) -> List[str]:
        """Remove and return every complete line (terminators stripped)."""
        text = self._text
        if not text:
            return []
        hold_cr = text.endswith("\r")
        if hold_cr:
            text = text[:-1]
        parts = _LINE_BREAK.split(text)
        tail = parts.pop()
        if hold_cr:
            tail += "\r"
        self._text = tail
        return parts

    def take_tail(self) -> str:
        """Remove and return the unterminated tail."""
        tail, self._text = self._text, ""
        return tail

    def flush(self) -> str:
        """End of input: finish decoding and return the remaining text.

        Raises ``UnicodeDecodeError`` when the input stopped inside a
        multi-byte sequence.
        """
        try:
            self._text += self._decoder.decode(b"", final=True)
        finally:
            self._decoder.reset()
        tail = self._text.rstrip("\r")
        self._text = ""
        return tail

    def reset(self) -> None:
        self._decoder.reset()
        self._text = ""


__all__ = ["PendingBuffer"]
