"""End-to-end streaming through the client over ``httpx.MockTransport``.

Covers the sync and async controllers: lazy start, chunked delivery,
first-error termination, HTTP status errors, transport failures and
cancellation (direct and through a token).
"""
from __future__ import annotations

import asyncio
from typing import List

import httpx
import pytest

from openai_stream_sdk.base.cancellation import CancellationToken
from openai_stream_sdk.base.errors import (
    ErrorCode,
    HTTPStatusError,
    RemoteError,
    StreamCancelledError,
    TransportError,
)
from openai_stream_sdk.base.middleware import OpenAIMiddleware
from openai_stream_sdk.base.models import ChatMessage, ChatQuery
from openai_stream_sdk.base.streaming import SessionState
from openai_stream_sdk.tests.streaming.helpers import (
    async_stream_handler,
    chunk_json,
    iter_texts,
    make_async_client,
    make_client,
    split_at,
    sse,
    stream_handler,
)

QUERY = ChatQuery(model="gpt-4o-mini", messages=[ChatMessage(role="user", content="hi")])


def test_stream_is_lazy_and_sends_stream_flag():
    seen: List[httpx.Request] = []
    body = sse(chunk_json(content="Hel"), chunk_json(content="lo"), done=True)
    client = make_client(stream_handler(split_at(body, 17, 60, 101), seen=seen))
    stream = client.chats_stream(QUERY)
    assert seen == []  # nosec B101 - pytest assert in tests
    assert iter_texts(stream) == ["Hel", "lo"]  # nosec B101
    assert len(seen) == 1  # nosec B101
    request = seen[0]
    assert request.url.path == "/v1/chat/completions"  # nosec B101
    assert request.headers["accept"] == "text/event-stream"  # nosec B101
    assert b'"stream":true' in request.content.replace(b" ", b"")  # nosec B101
    assert stream.finished is True and stream.error is None  # nosec B101
    assert stream.done_received is True  # nosec B101


def test_first_processing_error_is_raised_after_prior_events_and_ends_stream():
    body = (
        sse(chunk_json(content="a"))
        + b'event: error\ndata: {"error":{"message":"overloaded","code":"busy"}}\n\n'
        + sse(chunk_json(content="never"))
    )
    client = make_client(stream_handler([body]))
    stream = client.chats_stream(QUERY)
    texts: List[str] = []
    with pytest.raises(RemoteError) as info:
        for chunk in stream:
            texts.append(chunk.delta_text)
    assert texts == ["a"]  # nosec B101
    assert info.value.message == "Overloaded"  # nosec B101
    assert info.value.code == "busy"  # nosec B101
    assert stream.error is info.value  # nosec B101
    assert list(stream) == []  # nosec B101


def test_http_error_status_raises_after_body_is_collected():
    client = make_client(stream_handler([b'{"error":"rate', b' limited"}'], status=500))
    with pytest.raises(HTTPStatusError) as info:
        list(client.chats_stream(QUERY))
    err = info.value
    assert err.status == 500  # nosec B101
    assert err.message == "rate limited"  # nosec B101
    assert err.code == ErrorCode.SERVER_ERROR  # nosec B101


def test_transport_failure_is_wrapped():
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(_boom)
    with pytest.raises(TransportError) as info:
        list(client.chats_stream(QUERY))
    assert info.value.code == ErrorCode.TRANSPORT  # nosec B101
    assert isinstance(info.value.raw, httpx.ConnectError)  # nosec B101


def test_cancel_mid_stream_stops_quietly():
    body = [sse(chunk_json(content="one")), sse(chunk_json(content="two")), sse(chunk_json(content="three"))]
    client = make_client(stream_handler(body))
    stream = client.chats_stream(QUERY)
    first = next(stream)
    assert first.delta_text == "one"  # nosec B101
    stream.cancel("user stop")
    assert list(stream) == []  # nosec B101
    assert stream.cancelled is True  # nosec B101
    assert isinstance(stream.error, StreamCancelledError)  # nosec B101
    assert stream.error.reason == "user stop"  # nosec B101
    stream.cancel("again")
    assert stream.error.reason == "user stop"  # nosec B101


def test_cancelled_token_before_start_sends_nothing():
    seen: List[httpx.Request] = []
    token = CancellationToken()
    token.cancel("not needed")
    client = make_client(stream_handler([sse(chunk_json())], seen=seen))
    stream = client.chats_stream(QUERY, token=token)
    assert list(stream) == []  # nosec B101
    assert seen == []  # nosec B101
    assert isinstance(stream.error, StreamCancelledError)  # nosec B101


def test_parent_token_cancel_reaches_stream():
    parent = CancellationToken()
    body = [sse(chunk_json(content="one")), sse(chunk_json(content="two"))]
    client = make_client(stream_handler(body))
    stream = client.chats_stream(QUERY, token=parent.child())
    assert next(stream).delta_text == "one"  # nosec B101
    parent.cancel("shutdown")
    assert list(stream) == []  # nosec B101
    assert stream.error.reason == "shutdown"  # nosec B101


def test_raw_data_observer_sees_every_chunk():
    chunks = split_at(sse(chunk_json(content="x"), done=True), 9, 40)
    raw: List[bytes] = []
    client = make_client(stream_handler(chunks))
    assert iter_texts(client.chats_stream(QUERY, on_receive_raw_data=raw.append)) == ["x"]  # nosec B101
    assert b"".join(raw) == b"".join(chunks)  # nosec B101


def test_context_manager_closes_after_early_exit():
    body = [sse(chunk_json(content="one")), sse(chunk_json(content="two"))]
    client = make_client(stream_handler(body))
    with client.chats_stream(QUERY) as stream:
        assert next(stream).delta_text == "one"  # nosec B101
    assert stream.finished is True  # nosec B101
    assert stream.error is None  # nosec B101


def test_async_stream_yields_events():
    body = sse(chunk_json(content="as"), chunk_json(content="ync"), done=True)

    async def _run() -> List[str]:
        async with make_async_client(async_stream_handler(split_at(body, 20, 77))) as client:
            out: List[str] = []
            async for chunk in client.chats_stream(QUERY):
                out.append(chunk.delta_text)
            return out

    assert asyncio.run(_run()) == ["as", "ync"]  # nosec B101


def test_async_stream_raises_status_error():
    async def _run() -> None:
        async with make_async_client(async_stream_handler([b'{"error":{"message":"no such model"}}'], status=404)) as client:
            async for _ in client.chats_stream(QUERY):
                pass

    with pytest.raises(HTTPStatusError) as info:
        asyncio.run(_run())
    assert info.value.status == 404  # nosec B101
    assert info.value.message == "no such model"  # nosec B101
    assert info.value.code == ErrorCode.NOT_FOUND  # nosec B101


def test_async_cancel_stops_iteration():
    body = [sse(chunk_json(content="one")), sse(chunk_json(content="two"))]

    async def _run():
        async with make_async_client(async_stream_handler(body)) as client:
            stream = client.chats_stream(QUERY)
            out = [(await stream.__anext__()).delta_text]
            stream.cancel("enough")
            async for chunk in stream:
                out.append(chunk.delta_text)
            return out, stream.error

    texts, error = asyncio.run(_run())
    assert texts == ["one"]  # nosec B101
    assert isinstance(error, StreamCancelledError)  # nosec B101


class _FailingChunkHook(OpenAIMiddleware):
    """Lets the first chunk through and fails on the next one."""

    def __init__(self) -> None:
        self.calls = 0

    def intercept_streaming_data(self, request, data: bytes) -> bytes:
        self.calls += 1
        if self.calls > 1:
            raise ValueError("hook failed")
        return data


def test_streaming_data_hook_failure_ends_stream_as_transport_error():
    body = [sse(chunk_json(content="one")), sse(chunk_json(content="two"))]
    client = make_client(stream_handler(body), middlewares=[_FailingChunkHook()])
    stream = client.chats_stream(QUERY)
    texts: List[str] = []
    with pytest.raises(TransportError) as info:
        for chunk in stream:
            texts.append(chunk.delta_text)
    assert texts == ["one"]  # nosec B101
    assert isinstance(info.value.raw, ValueError)  # nosec B101
    assert info.value.message == "hook failed"  # nosec B101
    assert stream.session.state is SessionState.COMPLETED  # nosec B101
    assert stream.finished is True  # nosec B101


def test_async_streaming_data_hook_failure_ends_stream_as_transport_error():
    body = [sse(chunk_json(content="one")), sse(chunk_json(content="two"))]

    async def _run():
        async with make_async_client(async_stream_handler(body), middlewares=[_FailingChunkHook()]) as client:
            stream = client.chats_stream(QUERY)
            texts: List[str] = []
            try:
                async for chunk in stream:
                    texts.append(chunk.delta_text)
            except TransportError as exc:
                return texts, exc, stream.session.state
            return texts, None, stream.session.state

    texts, error, state = asyncio.run(_run())
    assert texts == ["one"]  # nosec B101
    assert isinstance(error, TransportError)  # nosec B101
    assert isinstance(error.raw, ValueError)  # nosec B101
    assert state is SessionState.COMPLETED  # nosec B101


def test_finished_stream_detaches_from_a_long_lived_token():
    token = CancellationToken()
    client = make_client(stream_handler([sse(chunk_json(content="x"), done=True)]))
    for _ in range(3):
        assert iter_texts(client.chats_stream(QUERY, token=token)) == ["x"]  # nosec B101
    assert token._state.callbacks == []  # nosec B101


def test_failed_and_closed_streams_detach_from_the_token():
    token = CancellationToken()
    failing = make_client(stream_handler([b'{"error":"nope"}'], status=500))
    with pytest.raises(HTTPStatusError):
        list(failing.chats_stream(QUERY, token=token))
    body = [sse(chunk_json(content="one")), sse(chunk_json(content="two"))]
    with make_client(stream_handler(body)).chats_stream(QUERY, token=token) as stream:
        next(stream)
    assert token._state.callbacks == []  # nosec B101
    token.cancel("late")
    assert stream.error is None  # nosec B101


def test_async_stream_detaches_from_the_token():
    token = CancellationToken()
    body = sse(chunk_json(content="as"), done=True)

    async def _run() -> List[str]:
        async with make_async_client(async_stream_handler([body])) as client:
            return [chunk.delta_text async for chunk in client.chats_stream(QUERY, token=token)]

    assert asyncio.run(_run()) == ["as"]  # nosec B101
    assert token._state.callbacks == []  # nosec B101
