"""Incremental Server-Sent-Events interpreter producing typed results.

Purpose
-------
Network delivery does not respect event, line or JSON object boundaries.
:class:`SSEStreamInterpreter` consumes raw byte chunks in arrival order,
reconstructs logical events, decodes each payload into the caller's result
type and reports everything else as a typed error. It must tell "this JSON is
not finished yet" apart from "this JSON is broken" without ever blocking.

Pipeline per ``process_data`` call
----------------------------------
1. The chunk is decoded incrementally as UTF-8 into the owned
   :class:`PendingBuffer`. Invalid UTF-8 reports one ``UnknownContentError``
   and the chunk is dropped.
2. Complete lines are taken from the buffer; the unterminated tail stays
   buffered. Lines are trimmed and comment lines (``:``) skipped.
3. ``event:`` sets the type of the open event, ``data:`` appends a payload
   (repeated ``data:`` prefixes are stripped), a bare line starting with
   ``{`` or ``[`` counts as a payload (raw JSON bodies), and so does any
   other line while the open payload is an unfinished JSON container
   (pretty-printed bodies). Other fields are ignored and a blank line closes
   the open event.
4. After each payload line, and on an unterminated tail that is a payload
   line, the open data is trial-decoded against the result type and the API
   error envelope. Success closes the event at once, which covers servers
   that never send blank lines and objects whose final line has not been
   terminated yet.
5. A ``[DONE]`` payload ends the stream logically: no event, ``finished``
   becomes True.
6. Closed events are dispatched in order (see :meth:`_dispatch_message`).

Partial payloads
----------------
A payload that is not well-formed JSON but looks cut off (unbalanced brackets
or an open string) is retained as a prefix and joined with the next payload.
The same happens to an unextractable, invalid payload that was the last
candidate of its batch. When a later join fails while the new payload is a
complete document on its own (or ``[DONE]``), the stale prefix is reported
once as ``MalformedPayloadError`` and the new payload is dispatched normally.
At :meth:`finish` a pending prefix that looked cut off is logged and
discarded; one held only because it ended its batch is reported as
``MalformedPayloadError``, as it would have been had more data followed.
A truncated prefix replaced by ``[DONE]`` is discarded the same way.

Threading
---------
Not thread safe. One instance serves one stream and ``process_data`` must
be called sequentially; :class:`StreamingSession` guarantees this.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..errors import (
    ErrorCode,
    MalformedPayloadError,
    OpenAIError,
    RemoteError,
    UnknownContentError,
)
from ..extraction import ErrorPayloadExtractor, clean_error_message, looks_truncated
from ..logging import LogContext, get_logger, log_event
from ..models import APIErrorResponse
from .pending_buffer import PendingBuffer

T = TypeVar("T")

STREAM_COMPLETION_MARKER = "[DONE]"
DEFAULT_EVENT_TYPE = "message"
ERROR_EVENT_TYPE = "error"

_DATA_PREFIX = "data:"
_EVENT_PREFIX = "event:"
_IGNORED_FIELD_PREFIXES = ("id:", "retry:")


@dataclass(frozen=True)
class SSEEvent:
    """One framed event ready for decoding."""

    event_type: str
    data: str


class DecodeOutcome(str, Enum):
    """How a closed event was classified by the dispatch step."""

    EVENT = "event"
    PARTIAL_PENDING = "partial_pending"
    REMOTE_ERROR = "remote_error"
    MALFORMED = "malformed"
    DONE = "done"
    IGNORED = "ignored"


def strip_data_prefixes(line: str) -> str:
    """Remove one or more leading ``data:`` prefixes and surrounding spaces."""
    payload = line
    while payload.startswith(_DATA_PREFIX):
        payload = payload[len(_DATA_PREFIX):].lstrip()
    return payload.strip()


def _parse_json(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


class SSEStreamInterpreter(Generic[T]):
    """Stateful framer and decoder for one response stream.

    Parameters:
        result_type: Type each successful payload is decoded into (pydantic
            model, dataclass, or anything ``pydantic.TypeAdapter`` accepts).
        extractor: Error payload extractor; defaults to the shortest-message
            policy.
        logger: Logger for partial/sentinel/malformed diagnostics.
        ctx: Log context attached to every diagnostic event.
    """

    def __init__(
        self,
        result_type: Type[T],
        *,
        extractor: Optional[ErrorPayloadExtractor] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._result_adapter: TypeAdapter[T] = TypeAdapter(result_type)
        self._error_adapter: TypeAdapter[APIErrorResponse] = TypeAdapter(APIErrorResponse)
        self._extractor = extractor or ErrorPayloadExtractor()
        self._logger = logger or get_logger("openai_stream_sdk.streaming")
        self._ctx = ctx
        self._buffer = PendingBuffer()
        self._event_type: Optional[str] = None
        self._data_lines: List[str] = []
        self._partial: Optional[str] = None
        # set when the partial was held only because it ended its batch
        self._partial_suspect = False
        self._finished = False
        self._on_event: Optional[Callable[[T], None]] = None
        self._on_error: Optional[Callable[[OpenAIError], None]] = None

    # ------------------------------------------------------------------ API
    def set_event_callbacks(
        self,
        on_event: Callable[[T], None],
        on_error: Callable[[OpenAIError], None],
    ) -> None:
        self._on_event = on_event
        self._on_error = on_error

    @property
    def finished(self) -> bool:
        """Whether the ``[DONE]`` sentinel has been seen."""
        return self._finished

    @property
    def pending_size(self) -> int:
        """Characters held back: unterminated tail, open data and partial prefix."""
        open_data = sum(len(line) for line in self._data_lines)
        return len(self._buffer) + open_data + len(self._partial or "")

    def process_data(self, chunk: bytes) -> None:
        """Consume one chunk of raw bytes and dispatch every completed event."""
        if not chunk:
            return
        try:
            self._buffer.feed(chunk)
        except UnicodeDecodeError as exc:
            self._log("stream.sse.unknown_content", logging.WARNING, size=len(chunk))
            self._emit_error(UnknownContentError(raw=exc))
            return
        candidates: List[SSEEvent] = []
        for line in self._buffer.take_lines():
            self._consume_line(line, candidates)
        self._trial_decode_tail(candidates)
        self._dispatch(candidates)

    def finish(self) -> None:
        """Flush the unterminated tail at end of input.

        Called once after the transport delivered the last chunk. Any open
        event is closed and dispatched. A truncated prefix that never
        completed is discarded; a held invalid payload is reported.
        """
        candidates: List[SSEEvent] = []
        for line in self._buffer.take_lines():
            self._consume_line(line, candidates)
        try:
            tail = self._buffer.flush()
        except UnicodeDecodeError as exc:
            tail = ""
            self._emit_error(UnknownContentError(raw=exc))
        if tail:
            self._consume_line(tail, candidates)
        self._close_event(candidates)
        self._dispatch(candidates, final=True)
        if self._partial is not None:
            partial, self._partial = self._partial, None
            suspect, self._partial_suspect = self._partial_suspect, False
            if suspect:
                self._report_malformed(partial)
            else:
                self._log("stream.sse.partial_discarded", logging.WARNING, size=len(partial))

    def reset(self) -> None:
        """Discard every buffered byte and open event (used on cancel)."""
        self._buffer.reset()
        self._event_type = None
        self._data_lines = []
        self._partial = None
        self._partial_suspect = False

    # -------------------------------------------------------------- framing
    def _consume_line(self, raw_line: str, candidates: List[SSEEvent]) -> None:
        line = raw_line.strip()
        if not line:
            self._close_event(candidates)
            return
        if line.startswith(":"):
            return
        if line.startswith(_DATA_PREFIX) or line[0] in "{[":
            self._data_lines.append(strip_data_prefixes(line))
            if self._open_data_decodes("\n".join(self._data_lines)):
                self._close_event(candidates)
            return
        if line.startswith(_EVENT_PREFIX):
            self._event_type = line[len(_EVENT_PREFIX):].strip() or None
            return
        if self._open_json_continues(line):
            # pretty-printed JSON body: inner lines carry no prefix
            self._data_lines.append(line)
            if self._open_data_decodes("\n".join(self._data_lines)):
                self._close_event(candidates)
            return
        # id:, retry: and unknown fields carry nothing we act on

    def _trial_decode_tail(self, candidates: List[SSEEvent]) -> None:
        tail = self._buffer.tail.strip()
        if not tail:
            return
        if not (tail.startswith(_DATA_PREFIX) or tail[0] in "{[" or self._open_json_continues(tail)):
            return
        payload = strip_data_prefixes(tail)
        if not payload:
            return
        if self._open_data_decodes("\n".join([*self._data_lines, payload])):
            self._buffer.take_tail()
            self._data_lines.append(payload)
            self._close_event(candidates)

    def _open_json_continues(self, line: str) -> bool:
        """Whether an unprefixed ``line`` belongs to an unfinished JSON payload."""
        if not self._data_lines or line.startswith(_IGNORED_FIELD_PREFIXES):
            return False
        return looks_truncated("\n".join(self._data_lines))

    def _open_data_decodes(self, data: str) -> bool:
        if self._trial_decode(data):
            return True
        return self._partial is not None and self._trial_decode(self._partial + data)

    def _trial_decode(self, payload: str) -> bool:
        """Non-committal decode against the result type and the error envelope."""
        if payload == STREAM_COMPLETION_MARKER:
            return True
        ok, parsed = _parse_json(payload)
        if not ok:
            return False
        for adapter in (self._result_adapter, self._error_adapter):
            try:
                adapter.validate_python(parsed)
                return True
            except ValidationError:
                continue
        return False

    def _close_event(self, candidates: List[SSEEvent]) -> None:
        event_type = self._event_type or DEFAULT_EVENT_TYPE
        data_lines, self._data_lines = self._data_lines, []
        self._event_type = None
        if not data_lines:
            return
        candidates.append(SSEEvent(event_type=event_type, data="\n".join(data_lines)))

    # ------------------------------------------------------------- dispatch
    def _dispatch(self, candidates: List[SSEEvent], *, final: bool = False) -> None:
        for index, event in enumerate(candidates):
            if self._finished:
                self._log("stream.sse.after_done", logging.DEBUG, event_type=event.event_type)
                continue
            is_last = index == len(candidates) - 1 and not final
            if event.event_type == DEFAULT_EVENT_TYPE:
                self._dispatch_message(event.data, is_last=is_last)
            elif event.event_type == ERROR_EVENT_TYPE:
                self._dispatch_error_event(event.data)
            else:
                self._emit_error(
                    RemoteError(
                        code=ErrorCode.UNKNOWN_EVENT,
                        message=f"Unknown event type: {event.event_type}",
                        raw=event.data,
                    )
                )

    def _dispatch_message(self, payload: str, *, is_last: bool) -> DecodeOutcome:
        """Classify one ``message`` payload and deliver the outcome.

        Order: sentinel, strict decode, partial hypothesis, error envelope,
        extracted error, partial re-buffering of the batch's last candidate,
        malformed payload.
        """
        payload = payload.strip()
        if not payload:
            return DecodeOutcome.IGNORED
        if self._partial is not None:
            prefix, self._partial = self._partial, None
            suspect, self._partial_suspect = self._partial_suspect, False
            return self._dispatch_joined(prefix, payload, is_last=is_last, suspect=suspect)
        if payload == STREAM_COMPLETION_MARKER:
            self._finished = True
            self._log("stream.sse.done", logging.DEBUG)
            return DecodeOutcome.DONE
        return self._classify(payload, is_last=is_last)

    def _dispatch_joined(self, prefix: str, payload: str, *, is_last: bool, suspect: bool) -> DecodeOutcome:
        joined = prefix + payload
        well_formed, parsed = _parse_json(joined)
        if well_formed and self._try_emit(parsed):
            return DecodeOutcome.EVENT
        if not well_formed and self._trial_decode(payload):
            # The new payload stands on its own, so the prefix never completed.
            if suspect:
                self._report_malformed(prefix)
            elif payload == STREAM_COMPLETION_MARKER:
                self._log("stream.sse.partial_discarded", logging.WARNING, size=len(prefix))
            else:
                self._log("stream.sse.malformed", logging.WARNING, size=len(prefix), stale_prefix=True)
                self._emit_error(
                    MalformedPayloadError(message="Received an incomplete payload", payload=prefix)
                )
            return self._dispatch_message(payload, is_last=is_last)
        if not well_formed and looks_truncated(joined):
            return self._retain(joined)
        return self._classify(joined, is_last=is_last)

    def _classify(self, payload: str, *, is_last: bool) -> DecodeOutcome:
        well_formed, parsed = _parse_json(payload)
        if well_formed and self._try_emit(parsed):
            return DecodeOutcome.EVENT
        if not well_formed and looks_truncated(payload):
            return self._retain(payload)
        if well_formed:
            try:
                envelope = self._error_adapter.validate_python(parsed)
            except ValidationError:
                envelope = None
            if envelope is not None:
                self._emit_error(
                    RemoteError(
                        code=envelope.error.code or ErrorCode.REMOTE_ERROR,
                        message=envelope.error.message,
                        raw=payload,
                    )
                )
                return DecodeOutcome.REMOTE_ERROR
        extracted = self._extractor.extract(payload)
        if extracted is not None:
            self._emit_error(
                RemoteError(
                    code=extracted.code or ErrorCode.REMOTE_ERROR,
                    message=clean_error_message(extracted.message),
                    raw=payload,
                )
            )
            return DecodeOutcome.REMOTE_ERROR
        if is_last and not well_formed:
            return self._retain(payload, suspect=True)
        self._report_malformed(payload)
        return DecodeOutcome.MALFORMED

    def _dispatch_error_event(self, payload: str) -> DecodeOutcome:
        payload = payload.strip()
        extracted = self._extractor.extract(payload) if payload else None
        message = extracted.message if extracted is not None else payload
        code = extracted.code if extracted is not None and extracted.code else ErrorCode.REMOTE_SERVER_MESSAGE
        self._emit_error(RemoteError(code=code, message=clean_error_message(message), raw=payload))
        return DecodeOutcome.REMOTE_ERROR

    def _try_emit(self, parsed: Any) -> bool:
        try:
            obj = self._result_adapter.validate_python(parsed)
        except ValidationError:
            return False
        if self._on_event is not None:
            self._on_event(obj)
        return True

    def _retain(self, payload: str, *, suspect: bool = False) -> DecodeOutcome:
        self._partial = payload
        self._partial_suspect = suspect
        self._log("stream.sse.partial", logging.DEBUG, size=len(payload), suspect=suspect)
        return DecodeOutcome.PARTIAL_PENDING

    def _report_malformed(self, payload: str) -> None:
        self._log("stream.sse.malformed", logging.WARNING, size=len(payload))
        self._emit_error(MalformedPayloadError(payload=payload))

    def _emit_error(self, error: OpenAIError) -> None:
        if self._on_error is not None:
            self._on_error(error)

    def _log(self, event: str, level: int, **fields: Any) -> None:
        log_event(self._logger, event, self._ctx, level=level, **fields)


__all__ = [
    "SSEEvent",
    "DecodeOutcome",
    "SSEStreamInterpreter",
    "STREAM_COMPLETION_MARKER",
    "strip_data_prefixes",
]
