"""SDK error taxonomy public surface.

Re-exports the implementations under ``openai_stream_sdk.base.errors_parts``
so callers have one stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.openai_error import OpenAIError
from .errors_parts.stream_errors import (
    HTTPStatusError,
    MalformedPayloadError,
    RemoteError,
    StreamCancelledError,
    TransportError,
    UnknownContentError,
)
from .errors_parts.classification import (
    classify_exception,
    code_for_status,
    wrap_transport_exception,
)

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
