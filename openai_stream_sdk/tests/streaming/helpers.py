"""Helpers for streaming tests: payload builders, collectors and mock transports.

Chunks are produced as raw bytes so tests can split them at arbitrary
offsets; transports serve them through ``httpx.MockTransport`` with an
iterator body, so the client sees them as separate network reads.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Iterable, Iterator, List, Optional

import httpx
from pydantic import BaseModel

from ...base.errors import OpenAIError
from ...base.streaming import SSEStreamInterpreter
from ...client import AsyncOpenAIClient, OpenAIClient
from ...config import ClientConfig

BASE_URL = "https://api.test/v1"
API_KEY = "sk-live-123"


class Item(BaseModel):
    """Minimal result type used by framer tests."""

    id: int
    text: str


def chunk_json(chunk_id: str = "chatcmpl-1", content: Optional[str] = "Hi", role: Optional[str] = None) -> str:
    delta: dict = {}
    if role is not None:
        delta["role"] = role
    if content is not None:
        delta["content"] = content
    return json.dumps(
        {
            "id": chunk_id,
            "object": "chat.completion.chunk",
            "created": 1700000000,
            "model": "gpt-4o-mini",
            "choices": [{"index": 0, "delta": delta, "finish_reason": None}],
        }
    )


def sse(*payloads: str, done: bool = False) -> bytes:
    """Frame each payload as one ``data:`` event (optionally followed by ``[DONE]``)."""
    body = "".join(f"data: {p}\n\n" for p in payloads)
    if done:
        body += "data: [DONE]\n\n"
    return body.encode("utf-8")


def split_at(data: bytes, *offsets: int) -> List[bytes]:
    """Split ``data`` at the given byte offsets (sorted, deduplicated)."""
    cuts = [0, *sorted(set(o for o in offsets if 0 < o < len(data))), len(data)]
    return [data[a:b] for a, b in zip(cuts, cuts[1:])]


@dataclass
class Collector:
    """Records interpreter (or session) callbacks in arrival order."""

    events: List[Any] = field(default_factory=list)
    errors: List[OpenAIError] = field(default_factory=list)
    order: List[str] = field(default_factory=list)

    def on_event(self, obj: Any) -> None:
        self.events.append(obj)
        self.order.append("event")

    def on_error(self, err: OpenAIError) -> None:
        self.errors.append(err)
        self.order.append("error")

    def attach(self, interpreter: SSEStreamInterpreter) -> "Collector":
        interpreter.set_event_callbacks(self.on_event, self.on_error)
        return self


def feed(interpreter: SSEStreamInterpreter, chunks: Iterable[bytes], *, finish: bool = True) -> None:
    for c in chunks:
        interpreter.process_data(c)
    if finish:
        interpreter.finish()


def stream_handler(
    chunks: List[bytes],
    status: int = 200,
    seen: Optional[List[httpx.Request]] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering every request with ``chunks`` as a chunked body."""

    def _handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(
            status,
            headers={"content-type": "text/event-stream"},
            content=iter(list(chunks)),
        )

    return _handler


def async_stream_handler(chunks: List[bytes], status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    async def _body() -> AsyncIterator[bytes]:
        for c in chunks:
            yield c

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, headers={"content-type": "text/event-stream"}, content=_body())

    return _handler


def json_handler(
    payload: Any,
    status: int = 200,
    seen: Optional[List[httpx.Request]] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    def _handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload)

    return _handler


def make_config(**overrides: Any) -> ClientConfig:
    data = {"base_url": BASE_URL, "api_key": API_KEY}
    data.update(overrides)
    return ClientConfig.from_mapping(data)


def make_client(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> OpenAIClient:
    return OpenAIClient(make_config(), transport=httpx.MockTransport(handler), **kwargs)


def make_async_client(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> AsyncOpenAIClient:
    return AsyncOpenAIClient(make_config(), transport=httpx.MockTransport(handler), **kwargs)


def chat_result(text: str = "Hello there", result_id: str = "chatcmpl-9") -> dict:
    return {
        "id": result_id,
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o-mini",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}
        ],
        "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
    }


def iter_texts(stream: Iterator[Any]) -> List[str]:
    return [chunk.delta_text for chunk in stream]
