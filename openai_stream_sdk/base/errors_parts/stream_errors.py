"""
Typed errors produced while interpreting a response stream.

``UnknownContentError`` and ``MalformedPayloadError`` come from the framer's
decode layer, ``RemoteError`` carries an error reported by the server inside
the stream, ``HTTPStatusError`` is composed once a >= 400 response body has
been fully collected, ``TransportError`` wraps network failures and
``StreamCancelledError`` reports a caller-initiated stop.

Only the facade layer raises these; the framer and session hand them to
callbacks.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..cancellation import CancelledError
from .error_code import ErrorCode
from .openai_error import OpenAIError


@dataclass
class UnknownContentError(OpenAIError):
    """A chunk was not valid UTF-8 text; it is dropped and reported once."""

    code: Union[ErrorCode, str] = ErrorCode.UNKNOWN_CONTENT
    message: str = "Received content that could not be decoded as UTF-8 text"


@dataclass
class MalformedPayloadError(OpenAIError):
    """A fully received payload was not valid JSON and not a recoverable partial.

    ``payload`` holds the offending text. The stream keeps going after this
    error is reported.
    """

    code: Union[ErrorCode, str] = ErrorCode.MALFORMED_PAYLOAD
    message: str = "Received a malformed payload"
    payload: str = ""


@dataclass
class RemoteError(OpenAIError):
    """An error reported by the server inside an otherwise healthy response."""

    code: Union[ErrorCode, str] = ErrorCode.REMOTE_ERROR
    message: str = ""


@dataclass
class HTTPStatusError(OpenAIError):
    """A response with status >= 400, raised after its body was fully read.

    Attributes:
        status: HTTP status code.
        reason: Reason phrase for the status (``"Internal Server Error"``).
        body: Complete decoded response body.
    """

    code: Union[ErrorCode, str] = ErrorCode.UNKNOWN
    message: str = ""
    status: int = 0
    reason: str = ""
    body: str = ""

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"HTTP {self.status} {self.reason}: {self.message}"


@dataclass
class TransportError(OpenAIError):
    """A network level failure (timeout, connection reset, TLS, protocol)."""

    code: Union[ErrorCode, str] = ErrorCode.TRANSPORT
    message: str = "Transport failure"


@dataclass
class StreamCancelledError(OpenAIError, CancelledError):
    """The caller cancelled the stream; ``message`` holds the cancel reason."""

    code: Union[ErrorCode, str] = ErrorCode.CANCELLED
    message: str = "stream cancelled"
    reason: Optional[str] = None


__all__ = [
    "UnknownContentError",
    "MalformedPayloadError",
    "RemoteError",
    "HTTPStatusError",
    "TransportError",
    "StreamCancelledError",
]
