"""
Base exception type for every error the SDK surfaces.

Transport failures, HTTP status errors and stream decoding errors all derive
from :class:`OpenAIError` so callers can catch one type at the API boundary.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from .error_code import ErrorCode


@dataclass
class OpenAIError(Exception):
    """Structured SDK error with a normalized (or server supplied) code.

    Attributes:
        code: :class:`ErrorCode` classification, or the raw code string the
            server reported.
        message: Human-readable error message.
        raw: Optional original payload or exception for diagnostics.
    """

    code: Union[ErrorCode, str]
    message: str
    raw: Optional[Any] = None

    @property
    def code_value(self) -> str:
        return self.code.value if isinstance(self.code, ErrorCode) else str(self.code)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.code_value}: {self.message}"


__all__ = ["OpenAIError"]
