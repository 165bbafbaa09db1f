"""openai_stream_sdk package

Client SDK for a chat completions style HTTP API with an incremental
Server-Sent-Events stream interpreter.

Public API (re-exported):
    - Version: ``__version__``
    - Clients: :class:`OpenAIClient`, :class:`AsyncOpenAIClient`
    - Configuration: :class:`ClientConfig`, :func:`get_client_config`
    - Errors: :class:`OpenAIError` and its subclasses, :class:`ErrorCode`
    - DTOs: chat, model listing, moderation and transcription models
    - Streaming: :class:`StreamController`, :class:`AsyncStreamController`
    - Middleware: :class:`OpenAIMiddleware`, :class:`InspectorMiddleware`,
      :func:`set_global_middleware`
"""

from .base.cancellation import CancellationToken
from .base.errors import (
    ErrorCode,
    HTTPStatusError,
    MalformedPayloadError,
    OpenAIError,
    RemoteError,
    StreamCancelledError,
    TransportError,
    UnknownContentError,
)
from .base.middleware import InspectorMiddleware, OpenAIMiddleware, set_global_middleware
from .base.models import (
    AudioFileType,
    AudioResponseFormat,
    AudioTranscriptionQuery,
    AudioTranscriptionResult,
    ChatMessage,
    ChatQuery,
    ChatResult,
    ChatStreamResult,
    ModelResult,
    ModelsResult,
    ModerationsQuery,
    ModerationsResult,
)
from .base.streaming import AsyncStreamController, StreamController
from .client import AsyncOpenAIClient, OpenAIClient
from .config import ClientConfig, get_client_config

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Clients
    "OpenAIClient",
    "AsyncOpenAIClient",
    "ClientConfig",
    "get_client_config",
    # Errors
    "ErrorCode",
    "OpenAIError",
    "UnknownContentError",
    "MalformedPayloadError",
    "RemoteError",
    "HTTPStatusError",
    "TransportError",
    "StreamCancelledError",
    # DTOs
    "ChatMessage",
    "ChatQuery",
    "ChatResult",
    "ChatStreamResult",
    "ModelResult",
    "ModelsResult",
    "ModerationsQuery",
    "ModerationsResult",
    "AudioFileType",
    "AudioResponseFormat",
    "AudioTranscriptionQuery",
    "AudioTranscriptionResult",
    # Streaming & cancellation
    "StreamController",
    "AsyncStreamController",
    "CancellationToken",
    # Middleware
    "OpenAIMiddleware",
    "InspectorMiddleware",
    "set_global_middleware",
]
