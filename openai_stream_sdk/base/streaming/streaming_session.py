"""Streaming session binding one HTTP exchange to one SSE interpreter.

Purpose
-------
:class:`StreamingSession` is driven by a transport (see
``openai_stream_sdk.base.http.exchange``) through three methods:
``receive_response`` once the status line and headers arrived,
``receive_data`` for every body chunk, and ``complete`` exactly once at the
end (with the transport error, if any). It turns these into three consumer
callbacks: content, processing error and completion.

HTTP status contract
--------------------
A status >= 400 does not abort the exchange. The session moves to
``COLLECTING_ERROR_BODY`` and keeps accumulating bytes without framing them,
because error bodies may be chunked too. Only at completion does it run the
middleware error hooks and surface one :class:`HTTPStatusError` carrying the
status, reason phrase, full body and extracted message.

Serialization
-------------
Every transport-facing method and every callback runs under one reentrant
lock, so consumer-visible events are strictly ordered even when bytes and
cancellation arrive on different threads. ``cancel`` moves the session to
``COMPLETED``, discards the interpreter's buffered state and suppresses every
later callback.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from http import HTTPStatus
from typing import Callable, Generic, Mapping, Optional, Type, TypeVar

import httpx

from ..errors import HTTPStatusError, OpenAIError, code_for_status
from ..extraction import ErrorPayloadExtractor
from ..logging import LogContext, get_logger, log_event, normalized_log_event
from ..middleware import MiddlewareChain
from .sse_interpreter import SSEStreamInterpreter

T = TypeVar("T")


class SessionState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    COLLECTING_ERROR_BODY = "collecting_error_body"
    COMPLETED = "completed"


def reason_phrase(status: int) -> str:
    """Standard reason phrase for ``status`` (empty when unknown)."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


class StreamingSession(Generic[T]):
    """Own one in-flight streaming exchange.

    Parameters:
        result_type: Decode target for each streamed event.
        on_receive_content: ``(session, obj)`` for every decoded event.
        on_processing_error: ``(session, error)`` for every typed error.
        on_complete: ``(session, error_or_none)`` exactly once.
        on_receive_raw_data: Optional observer of raw chunks, called before
            middleware and framing.
        middleware: Chain whose streaming-data and error hooks are applied.
        request: The outgoing request, handed to middleware hooks.
        extractor: Error payload extractor shared with the interpreter.
    """

    def __init__(
        self,
        result_type: Type[T],
        *,
        on_receive_content: Callable[["StreamingSession[T]", T], None],
        on_processing_error: Callable[["StreamingSession[T]", OpenAIError], None],
        on_complete: Callable[["StreamingSession[T]", Optional[BaseException]], None],
        on_receive_raw_data: Optional[Callable[[bytes], None]] = None,
        middleware: Optional[MiddlewareChain] = None,
        request: Optional[httpx.Request] = None,
        extractor: Optional[ErrorPayloadExtractor] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._logger = logger or get_logger("openai_stream_sdk.streaming")
        self._ctx = ctx or LogContext()
        self._extractor = extractor or ErrorPayloadExtractor()
        self._interpreter: SSEStreamInterpreter[T] = SSEStreamInterpreter(
            result_type, extractor=self._extractor, logger=self._logger, ctx=self._ctx
        )
        self._interpreter.set_event_callbacks(self._deliver_content, self._deliver_error)
        self._on_receive_content = on_receive_content
        self._on_processing_error = on_processing_error
        self._on_complete = on_complete
        self._on_receive_raw_data = on_receive_raw_data
        self._middleware = middleware or MiddlewareChain()
        self.request = request
        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._status: Optional[int] = None
        self._reason = ""
        self._response: Optional[httpx.Response] = None
        self._error_body = bytearray()
        self._terminal_error: Optional[BaseException] = None
        self._cancelled = False

    # ------------------------------------------------------------ inspection
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status_code(self) -> Optional[int]:
        return self._status

    @property
    def terminal_error(self) -> Optional[BaseException]:
        """Error carried by the ``COMPLETED`` state (``None`` on success)."""
        return self._terminal_error

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def finished(self) -> bool:
        """Whether the stream sent its ``[DONE]`` sentinel."""
        return self._interpreter.finished

    @property
    def pending_size(self) -> int:
        return self._interpreter.pending_size

    # ------------------------------------------------------- transport side
    def receive_response(
        self,
        status: int,
        headers: Optional[Mapping[str, str]] = None,
        reason: Optional[str] = None,
        response: Optional[httpx.Response] = None,
    ) -> None:
        """Record the response status; >= 400 starts collecting the error body."""
        with self._lock:
            if self._state is not SessionState.IDLE:
                return
            self._status = status
            self._reason = reason or reason_phrase(status)
            self._response = response
            self._ctx.status_code = status
            if status >= 400:
                self._transition(SessionState.COLLECTING_ERROR_BODY)
            else:
                self._transition(SessionState.STREAMING)

    def receive_data(self, chunk: bytes) -> None:
        """Feed one body chunk (observer, then middleware, then framing)."""
        if self._on_receive_raw_data is not None and not self._cancelled:
            self._on_receive_raw_data(chunk)
        with self._lock:
            if self._state is SessionState.IDLE:
                self._transition(SessionState.STREAMING)
            if self._state is SessionState.COMPLETED:
                return
            if self._state is SessionState.COLLECTING_ERROR_BODY:
                self._error_body.extend(chunk)
                return
            data = self._middleware.run_streaming_data(self.request, chunk)
            self._interpreter.process_data(data)

    def complete(self, error: Optional[BaseException] = None) -> None:
        """Finalize the exchange; ``error`` is the transport failure, if any."""
        with self._lock:
            if self._state is SessionState.COMPLETED:
                return
            if self._state is SessionState.COLLECTING_ERROR_BODY:
                terminal = self._compose_status_error(error)
                self._deliver_error(terminal)
                if self._cancelled:
                    # the consumer stopped the session while handling the error
                    self._terminal_error = terminal
                    return
            else:
                self._interpreter.finish()
                terminal = error
            self._finalize(terminal)

    def cancel(self, reason: Optional[str] = None) -> None:
        """Stop delivering callbacks and drop all buffered stream state."""
        with self._lock:
            if self._state is SessionState.COMPLETED:
                return
            self._cancelled = True
            self._interpreter.reset()
            self._error_body.clear()
            self._transition(SessionState.COMPLETED)
            log_event(self._logger, "stream.session.cancelled", self._ctx, level=logging.DEBUG, reason=reason)

    # --------------------------------------------------------------- helpers
    def _compose_status_error(self, transport_error: Optional[BaseException]) -> HTTPStatusError:
        body_bytes = bytes(self._error_body)
        body = body_bytes.decode("utf-8", errors="replace")
        status = self._status or 0
        message = self._extractor.message_or_raw(body) or self._reason or f"HTTP {status}"
        err = HTTPStatusError(
            code=code_for_status(status),
            message=message,
            raw=transport_error,
            status=status,
            reason=self._reason,
            body=body,
        )
        self._middleware.run_error(self._response, self.request, body_bytes, err)
        return err

    def _finalize(self, terminal: Optional[BaseException]) -> None:
        self._terminal_error = terminal
        self._transition(SessionState.COMPLETED)
        normalized_log_event(
            self._logger,
            "stream.session.complete" if terminal is None else "stream.session.error",
            self._ctx,
            phase="finalize",
            error_code=getattr(terminal, "code_value", None) or (type(terminal).__name__ if terminal else None),
            emitted=None,
            tokens=None,
            level=logging.DEBUG if terminal is None else logging.INFO,
            finished=self._interpreter.finished,
        )
        if not self._cancelled:
            self._on_complete(self, terminal)

    def _transition(self, new_state: SessionState) -> None:
        old = self._state
        self._state = new_state
        log_event(
            self._logger,
            "stream.session.state",
            self._ctx,
            level=logging.DEBUG,
            from_state=old.value,
            to_state=new_state.value,
        )

    def _deliver_content(self, obj: T) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._on_receive_content(self, obj)

    def _deliver_error(self, error: OpenAIError) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._on_processing_error(self, error)


__all__ = ["SessionState", "StreamingSession", "reason_phrase"]
