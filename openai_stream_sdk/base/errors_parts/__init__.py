"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `openai_stream_sdk.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .openai_error import OpenAIError
from .stream_errors import (
    HTTPStatusError,
    MalformedPayloadError,
    RemoteError,
    StreamCancelledError,
    TransportError,
    UnknownContentError,
)
from .classification import classify_exception, code_for_status, wrap_transport_exception

__all__ = [
    "ErrorCode",
    "OpenAIError",
    "UnknownContentError",
    "MalformedPayloadError",
    "RemoteError",
    "HTTPStatusError",
    "TransportError",
    "StreamCancelledError",
    "classify_exception",
    "code_for_status",
    "wrap_transport_exception",
]
