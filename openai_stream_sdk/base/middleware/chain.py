"""Middleware chain running exchange hooks in order.

Request, streaming-data and response hooks are folded left to right so each
middleware sees the previous one's output. Error hooks are observers and all
run even when an earlier one raised nothing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import httpx

from .middleware_base import OpenAIMiddleware


@dataclass
class MiddlewareChain:
    """Composable chain executing middleware hooks in order.

    Attributes:
        items: Ordered list of middleware objects to execute.
    """

    items: List[OpenAIMiddleware] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.items)

    def run_request(self, request: httpx.Request) -> httpx.Request:
        req = request
        for m in self.items:
            req = m.intercept_request(req)
        return req

    def run_streaming_data(self, request: Optional[httpx.Request], data: bytes) -> bytes:
        """Fold ``intercept_streaming_data`` across the chain."""
        out = data
        for m in self.items:
            out = m.intercept_streaming_data(request, out)
        return out

    def run_response(
        self,
        response: Optional[httpx.Response],
        request: httpx.Request,
        data: Optional[bytes],
    ) -> Tuple[Optional[httpx.Response], Optional[bytes]]:
        resp, body = response, data
        for m in self.items:
            resp, body = m.intercept_response(resp, request, body)
        return resp, body

    def run_error(
        self,
        response: Optional[httpx.Response],
        request: Optional[httpx.Request],
        data: Optional[bytes],
        error: Optional[BaseException],
    ) -> None:
        for m in self.items:
            m.intercept_error(response, request, data, error)

    def extended(self, extra: List[OpenAIMiddleware]) -> "MiddlewareChain":
        """Return a new chain with ``extra`` appended (self is not modified)."""
        return MiddlewareChain(items=[*self.items, *extra])


__all__ = ["MiddlewareChain"]
