"""
Structured API error envelope DTOs.

``APIErrorResponse`` is the ``{"error": {...}}`` document the API returns for
failed requests and sometimes sends inside a stream. The stream interpreter
trial-decodes every payload against it so such errors surface as
``RemoteError`` rather than decoding failures.
"""
from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, field_validator


class APIError(BaseModel):
    """Error details inside the envelope.

    ``message`` may arrive as a list of strings (validation errors); it is
    joined with newlines. ``code`` accepts numbers and is normalized to a
    string.
    """

    message: str
    type: Optional[str] = None
    param: Optional[str] = None
    code: Optional[str] = None

    @field_validator("message", mode="before")
    @classmethod
    def _join_message(cls, value: Any) -> Any:
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return "\n".join(value)
        return value

    @field_validator("code", mode="before")
    @classmethod
    def _code_to_str(cls, value: Union[int, str, None]) -> Optional[str]:
        if value is None or isinstance(value, bool):
            return None
        return str(value)


class APIErrorResponse(BaseModel):
    """Top-level ``{"error": APIError}`` envelope."""

    error: APIError


__all__ = ["APIError", "APIErrorResponse"]
