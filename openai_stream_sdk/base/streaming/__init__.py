"""Streaming package for the SDK.

Exposes the SSE interpreter, the streaming session, the cancellable stream
controllers and the dispatch facade under a single namespace.
"""

from .pending_buffer import PendingBuffer
from .sse_interpreter import STREAM_COMPLETION_MARKER, DecodeOutcome, SSEEvent, SSEStreamInterpreter
from .streaming_session import SessionState, StreamingSession
from .stream_controller import AsyncStreamController, StreamController
from .dispatch import (
    aopen_stream,
    aperform_request,
    decode_response,
    open_stream,
    perform_request,
    stream_with_callbacks,
)

__all__ = [
    "PendingBuffer",
    "STREAM_COMPLETION_MARKER",
    "DecodeOutcome",
    "SSEEvent",
    "SSEStreamInterpreter",
    "SessionState",
    "StreamingSession",
    "StreamController",
    "AsyncStreamController",
    "decode_response",
    "perform_request",
    "aperform_request",
    "open_stream",
    "aopen_stream",
    "stream_with_callbacks",
]
