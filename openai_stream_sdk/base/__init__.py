"""
SDK Base Package

Exports the transport-independent building blocks used by the client:

- Errors: typed error taxonomy surfaced by every operation
- Models (DTOs): pydantic request and result objects
- Extraction: error payload recovery from partial or nested JSON
- Streaming: SSE interpreter, streaming session and stream controllers
- Middleware: request / streaming-data / response / error hooks
- Timeouts & Cancellation
"""

from .cancellation import CancellationToken, CancelledError
from .errors import (
    ErrorCode,
    HTTPStatusError,
    MalformedPayloadError,
    OpenAIError,
    RemoteError,
    StreamCancelledError,
    TransportError,
    UnknownContentError,
)
from .extraction import ErrorPayloadExtractor, ExtractedError, clean_error_message
from .middleware import InspectorMiddleware, MiddlewareChain, OpenAIMiddleware
from .models import (
    APIError,
    APIErrorResponse,
    ChatMessage,
    ChatQuery,
    ChatResult,
    ChatStreamResult,
    ModelResult,
    ModelsResult,
)
from .streaming import (
    AsyncStreamController,
    SSEEvent,
    SSEStreamInterpreter,
    SessionState,
    StreamController,
    StreamingSession,
)
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    # Errors
    "ErrorCode",
    "OpenAIError",
    "UnknownContentError",
    "MalformedPayloadError",
    "RemoteError",
    "HTTPStatusError",
    "TransportError",
    "StreamCancelledError",
    # Models
    "APIError",
    "APIErrorResponse",
    "ChatMessage",
    "ChatQuery",
    "ChatResult",
    "ChatStreamResult",
    "ModelResult",
    "ModelsResult",
    # Extraction
    "ErrorPayloadExtractor",
    "ExtractedError",
    "clean_error_message",
    # Middleware
    "OpenAIMiddleware",
    "MiddlewareChain",
    "InspectorMiddleware",
    # Streaming
    "SSEEvent",
    "SSEStreamInterpreter",
    "SessionState",
    "StreamingSession",
    "StreamController",
    "AsyncStreamController",
    # Timeouts & Cancellation
    "TimeoutConfig",
    "get_timeout_config",
    "CancellationToken",
    "CancelledError",
]
