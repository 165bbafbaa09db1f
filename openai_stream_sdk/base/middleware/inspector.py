"""Logging middleware that reports every exchange.

:class:`InspectorMiddleware` renders outgoing requests, streamed lines and
responses as readable text blocks (JSON bodies pretty-printed) and hands
them to a debug handler, or to the ``openai_stream_sdk.inspector`` logger at
DEBUG level when no handler is given. It never alters the traffic.

``Authorization`` header values are masked before being emitted.
"""
from __future__ import annotations

import json
import logging
from typing import Callable, Optional, Tuple

import httpx

from ..logging import get_logger
from .middleware_base import OpenAIMiddleware

_MASKED_HEADERS = frozenset({"authorization", "openai-organization"})


def _pretty_json(raw: str) -> Optional[str]:
    try:
        return json.dumps(json.loads(raw), indent=2, ensure_ascii=False)
    except ValueError:
        return None


def _render_body(data: Optional[bytes]) -> str:
    if data is None:
        return "Body: <no data>"
    if not data:
        return "Body: <empty>"
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return "Body: <non-UTF8 binary>"
    return f"Body:\n{_pretty_json(text) or text}"


def _render_headers(headers: httpx.Headers) -> str:
    lines = []
    for key, value in headers.items():
        shown = "***" if key.lower() in _MASKED_HEADERS else value
        lines.append(f"  {key}: {shown}")
    return "\n".join(lines)


class InspectorMiddleware(OpenAIMiddleware):
    """Emit a readable trace of each request, streamed line and response."""

    def __init__(
        self,
        label: str = "OpenAI Inspector",
        debug_handler: Optional[Callable[[str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.label = label
        self._debug_handler = debug_handler
        self._logger = logger or get_logger("openai_stream_sdk.inspector")

    def intercept_request(self, request: httpx.Request) -> httpx.Request:
        body: Optional[bytes]
        try:
            body = request.content
        except httpx.RequestNotRead:
            body = None
        if body is not None and request.headers.get("content-type", "").startswith("multipart/"):
            body_text = f"Body: <multipart, {len(body)} bytes>"
        else:
            body_text = _render_body(body)
        self._emit(
            f"[{self.label}] Outgoing Request:\n"
            f"Method: {request.method}\n"
            f"URL: {request.url}\n"
            f"Headers:\n{_render_headers(request.headers)}\n"
            f"{body_text}"
        )
        return request

    def intercept_streaming_data(self, request: Optional[httpx.Request], data: bytes) -> bytes:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            self._emit(f"[{self.label}] Streaming Data: <non-UTF8 binary>")
            return data
        for line in text.splitlines():
            if line.strip():
                self._emit(f"[{self.label}] Streaming Line: {line}")
        return data

    def intercept_response(
        self,
        response: Optional[httpx.Response],
        request: httpx.Request,
        data: Optional[bytes],
    ) -> Tuple[Optional[httpx.Response], Optional[bytes]]:
        parts = [f"[{self.label}] Response:"]
        if response is not None:
            parts.append(f"Status Code: {response.status_code}")
            parts.append(f"URL: {request.url}")
            parts.append(f"Headers:\n{_render_headers(response.headers)}")
        parts.append(_render_body(data))
        self._emit("\n".join(parts))
        return response, data

    def intercept_error(
        self,
        response: Optional[httpx.Response],
        request: Optional[httpx.Request],
        data: Optional[bytes],
        error: Optional[BaseException],
    ) -> None:
        status = response.status_code if response is not None else "-"
        url = request.url if request is not None else "<unknown URL>"
        self._emit(
            f"[{self.label}] Error Response:\nStatus Code: {status}\nURL: {url}\n"
            f"Error: {error}\n{_render_body(data)}"
        )

    def _emit(self, message: str) -> None:
        if self._debug_handler is not None:
            self._debug_handler(message)
        else:
            self._logger.debug(message)


__all__ = ["InspectorMiddleware"]
