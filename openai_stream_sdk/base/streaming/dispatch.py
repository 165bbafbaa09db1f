"""Typed dispatch facade: single results, lazy streams and callback streams.

Entry points
------------
``perform_request`` / ``aperform_request``
    Send one request and decode the whole body into the result type.
``open_stream`` / ``aopen_stream``
    Return a :class:`StreamController` / :class:`AsyncStreamController`
    yielding typed events lazily. Nothing is sent until iteration starts.
``stream_with_callbacks``
    Run a stream to completion delivering every event and error to plain
    callbacks, for callers that prefer the closure style.

Every exception crossing this boundary is an ``OpenAIError``: transport
failures are wrapped as ``TransportError`` by ``wrap_transport_exception``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ..cancellation import CancellationToken
from ..errors import (
    ErrorCode,
    HTTPStatusError,
    MalformedPayloadError,
    OpenAIError,
    RemoteError,
    UnknownContentError,
    code_for_status,
    wrap_transport_exception,
)
from ..extraction import ErrorPayloadExtractor, clean_error_message
from ..http.exchange import AsyncExchange, SyncExchange
from ..logging import LogContext, get_logger, normalized_log_event
from ..middleware import MiddlewareChain
from ..models import APIErrorResponse
from .stream_controller import AsyncStreamController, StreamController
from .streaming_session import StreamingSession, reason_phrase

T = TypeVar("T")

_LOGGER = get_logger("openai_stream_sdk.dispatch")


def decode_response(
    response: httpx.Response,
    request: httpx.Request,
    body: bytes,
    result_type: Type[T],
    *,
    middleware: Optional[MiddlewareChain] = None,
    extractor: Optional[ErrorPayloadExtractor] = None,
) -> T:
    """Decode a fully read response body or raise the matching SDK error.

    Status >= 400 raises :class:`HTTPStatusError` after the middleware error
    hooks ran. A ``str`` result type returns the body text as is (plain text
    transcription formats).
    """
    chain = middleware or MiddlewareChain()
    ex = extractor or ErrorPayloadExtractor()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        if response.status_code < 400:
            raise UnknownContentError(raw=exc) from exc
        text = body.decode("utf-8", errors="replace")

    if response.status_code >= 400:
        reason = response.reason_phrase or reason_phrase(response.status_code)
        err = HTTPStatusError(
            code=code_for_status(response.status_code),
            message=ex.message_or_raw(text) or reason,
            status=response.status_code,
            reason=reason,
            body=text,
        )
        chain.run_error(response, request, body, err)
        raise err

    if result_type is str:
        return text  # type: ignore[return-value]

    try:
        parsed: Any = json.loads(text)
    except ValueError:
        parsed = None
        well_formed = False
    else:
        well_formed = True
    if well_formed:
        try:
            return TypeAdapter(result_type).validate_python(parsed)
        except ValidationError:
            pass
        try:
            envelope = APIErrorResponse.model_validate(parsed)
        except ValidationError:
            envelope = None
        if envelope is not None:
            raise RemoteError(
                code=envelope.error.code or ErrorCode.REMOTE_ERROR,
                message=envelope.error.message,
                raw=text,
            )
    extracted = ex.extract(text)
    if extracted is not None:
        raise RemoteError(
            code=extracted.code or ErrorCode.REMOTE_ERROR,
            message=clean_error_message(extracted.message),
            raw=text,
        )
    raise MalformedPayloadError(payload=text)


def _log_call(event: str, ctx: LogContext, error: Optional[OpenAIError] = None) -> None:
    normalized_log_event(
        _LOGGER,
        event,
        ctx,
        phase="finalize" if event.endswith((".end", ".error")) else "start",
        error_code=error.code_value if error is not None else None,
        emitted=None,
        tokens=None,
        level=logging.DEBUG,
    )


def perform_request(
    client: httpx.Client,
    request: httpx.Request,
    result_type: Type[T],
    *,
    middleware: Optional[MiddlewareChain] = None,
    extractor: Optional[ErrorPayloadExtractor] = None,
    ctx: Optional[LogContext] = None,
) -> T:
    """Send ``request`` and return the decoded single result."""
    chain = middleware or MiddlewareChain()
    log_ctx = ctx or LogContext(endpoint=request.url.path)
    request = chain.run_request(request)
    _log_call("request.start", log_ctx)
    try:
        response = client.send(request)
    except Exception as exc:  # noqa: BLE001 - wrapped for callers
        err = wrap_transport_exception(exc)
        _log_call("request.error", log_ctx, err)
        raise err from exc
    response, body = chain.run_response(response, request, response.content)
    log_ctx.status_code = response.status_code if response is not None else None
    try:
        result = decode_response(response, request, body or b"", result_type, middleware=chain, extractor=extractor)
    except OpenAIError as err:
        _log_call("request.error", log_ctx, err)
        raise
    _log_call("request.end", log_ctx)
    return result


async def aperform_request(
    client: httpx.AsyncClient,
    request: httpx.Request,
    result_type: Type[T],
    *,
    middleware: Optional[MiddlewareChain] = None,
    extractor: Optional[ErrorPayloadExtractor] = None,
    ctx: Optional[LogContext] = None,
) -> T:
    """Async counterpart of :func:`perform_request`."""
    chain = middleware or MiddlewareChain()
    log_ctx = ctx or LogContext(endpoint=request.url.path)
    request = chain.run_request(request)
    _log_call("request.start", log_ctx)
    try:
        response = await client.send(request)
    except Exception as exc:  # noqa: BLE001 - wrapped for callers
        err = wrap_transport_exception(exc)
        _log_call("request.error", log_ctx, err)
        raise err from exc
    response, body = chain.run_response(response, request, response.content)
    log_ctx.status_code = response.status_code if response is not None else None
    try:
        result = decode_response(response, request, body or b"", result_type, middleware=chain, extractor=extractor)
    except OpenAIError as err:
        _log_call("request.error", log_ctx, err)
        raise
    _log_call("request.end", log_ctx)
    return result


def open_stream(
    client: httpx.Client,
    request: httpx.Request,
    result_type: Type[T],
    *,
    middleware: Optional[MiddlewareChain] = None,
    extractor: Optional[ErrorPayloadExtractor] = None,
    token: Optional[CancellationToken] = None,
    on_receive_raw_data: Optional[Callable[[bytes], None]] = None,
    ctx: Optional[LogContext] = None,
) -> StreamController[T]:
    """Prepare a lazy synchronous stream of ``result_type`` events."""
    chain = middleware or MiddlewareChain()
    request = chain.run_request(request)
    controller: StreamController[T] = StreamController(token)
    session: StreamingSession[T] = StreamingSession(
        result_type,
        on_receive_content=controller._on_content,
        on_processing_error=controller._on_processing_error,
        on_complete=controller._on_complete,
        on_receive_raw_data=on_receive_raw_data,
        middleware=chain,
        request=request,
        extractor=extractor,
        ctx=ctx or LogContext(endpoint=request.url.path),
    )
    controller.attach(session, SyncExchange(client, request, session))
    return controller


def aopen_stream(
    client: httpx.AsyncClient,
    request: httpx.Request,
    result_type: Type[T],
    *,
    middleware: Optional[MiddlewareChain] = None,
    extractor: Optional[ErrorPayloadExtractor] = None,
    token: Optional[CancellationToken] = None,
    on_receive_raw_data: Optional[Callable[[bytes], None]] = None,
    ctx: Optional[LogContext] = None,
) -> AsyncStreamController[T]:
    """Prepare a lazy asynchronous stream of ``result_type`` events."""
    chain = middleware or MiddlewareChain()
    request = chain.run_request(request)
    controller: AsyncStreamController[T] = AsyncStreamController(token)
    session: StreamingSession[T] = StreamingSession(
        result_type,
        on_receive_content=controller._on_content,
        on_processing_error=controller._on_processing_error,
        on_complete=controller._on_complete,
        on_receive_raw_data=on_receive_raw_data,
        middleware=chain,
        request=request,
        extractor=extractor,
        ctx=ctx or LogContext(endpoint=request.url.path),
    )
    controller.attach(session, AsyncExchange(client, request, session))
    return controller


def stream_with_callbacks(
    client: httpx.Client,
    request: httpx.Request,
    result_type: Type[T],
    *,
    on_event: Callable[[T], None],
    on_error: Optional[Callable[[OpenAIError], None]] = None,
    on_complete: Optional[Callable[[Optional[OpenAIError]], None]] = None,
    middleware: Optional[MiddlewareChain] = None,
    extractor: Optional[ErrorPayloadExtractor] = None,
    token: Optional[CancellationToken] = None,
    on_receive_raw_data: Optional[Callable[[bytes], None]] = None,
) -> Optional[OpenAIError]:
    """Run a stream to completion on the calling thread using callbacks.

    Unlike the iterator form, processing errors do not stop the stream: each
    one reaches ``on_error`` and decoding continues. ``on_complete`` fires
    once with the wrapped transport error (or ``None``), unless the token was
    cancelled. The same terminal error is returned.
    """
    chain = middleware or MiddlewareChain()
    request = chain.run_request(request)
    terminal: list[Optional[OpenAIError]] = [None]

    def _complete(_session: StreamingSession[T], error: Optional[BaseException]) -> None:
        wrapped = wrap_transport_exception(error) if error is not None else None
        terminal[0] = wrapped
        if on_complete is not None:
            on_complete(wrapped)

    session: StreamingSession[T] = StreamingSession(
        result_type,
        on_receive_content=lambda _s, obj: on_event(obj),
        on_processing_error=lambda _s, err: on_error(err) if on_error is not None else None,
        on_complete=_complete,
        on_receive_raw_data=on_receive_raw_data,
        middleware=chain,
        request=request,
        extractor=extractor,
        ctx=LogContext(endpoint=request.url.path),
    )
    exchange = SyncExchange(client, request, session)
    if token is not None:

        def _abort(reason: Optional[str]) -> None:
            session.cancel(reason)
            exchange.close()

        token.add_callback(_abort)
    try:
        exchange.run()
    finally:
        if token is not None:
            token.remove_callback(_abort)
    return terminal[0]


__all__ = [
    "decode_response",
    "perform_request",
    "aperform_request",
    "open_stream",
    "aopen_stream",
    "stream_with_callbacks",
]
