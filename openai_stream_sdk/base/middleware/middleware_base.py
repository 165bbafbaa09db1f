"""Base class for HTTP exchange middleware hooks.

This module defines :class:`OpenAIMiddleware`, the hook surface the client
and streaming sessions call around every exchange. All hooks are no-ops so
implementers override only what they need and callers never check for hook
presence.

Hook order for one exchange:
- ``intercept_request`` before the request is sent.
- ``intercept_streaming_data`` for every received chunk of a streaming
  response, before the chunk reaches the SSE interpreter.
- ``intercept_response`` once a non-streaming response body was read.
- ``intercept_error`` when the response status is >= 400, with the fully
  collected body and the error about to be surfaced.

Middleware instances are shared across concurrent streams; hooks must not
keep per-stream mutable state.
"""

from __future__ import annotations

from typing import Optional, Tuple

import httpx


class OpenAIMiddleware:
    """Base middleware with pass-through hooks.

    Failure modes:
    - Exceptions raised by hooks propagate to the caller of the exchange and
      are surfaced as transport failures.
    """

    def intercept_request(self, request: httpx.Request) -> httpx.Request:
        """Return the (possibly replaced) request to send."""
        return request

    def intercept_streaming_data(self, request: Optional[httpx.Request], data: bytes) -> bytes:
        """Return the bytes to hand to the interpreter for this chunk."""
        return data

    def intercept_response(
        self,
        response: Optional[httpx.Response],
        request: httpx.Request,
        data: Optional[bytes],
    ) -> Tuple[Optional[httpx.Response], Optional[bytes]]:
        return response, data

    def intercept_error(
        self,
        response: Optional[httpx.Response],
        request: Optional[httpx.Request],
        data: Optional[bytes],
        error: Optional[BaseException],
    ) -> None:
        """Observe an error response; the return value is ignored."""
        return None


__all__ = ["OpenAIMiddleware"]
