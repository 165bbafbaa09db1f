"""Pull-based drivers pumping an HTTP response into a streaming session.

``SyncExchange`` and ``AsyncExchange`` implement the transport half of the
session contract: they report the status once, deliver body chunks in order
and call ``complete`` exactly once. Reading is pulled one chunk at a time by
the caller (the stream controllers, or :meth:`SyncExchange.run` for the
callback helpers), so consumers control back-pressure.

Transport failures, and failures raised while the session handles a chunk
(a streaming-data hook, for instance), are never raised from ``pump``: they
are forwarded to ``session.complete(error)`` unchanged. Wrapping them into
SDK errors happens at the facade.

Cancellation: ``SyncExchange.close`` may be called from another thread while
``pump`` is blocked; closing the response makes the blocked read fail, and
the failure is ignored because the session is already completed.
"""
from __future__ import annotations

import threading
from contextlib import suppress
from typing import TYPE_CHECKING, AsyncIterator, Iterator, Optional

import httpx

if TYPE_CHECKING:
    from ..streaming.streaming_session import StreamingSession


class SyncExchange:
    """Drive one streaming request over an ``httpx.Client``."""

    def __init__(self, client: httpx.Client, request: httpx.Request, session: StreamingSession) -> None:
        self._client = client
        self._request = request
        self._session = session
        self._response: Optional[httpx.Response] = None
        self._chunks: Optional[Iterator[bytes]] = None
        self._done = False
        self._lock = threading.Lock()

    @property
    def done(self) -> bool:
        return self._done

    def pump(self) -> bool:
        """Deliver the next unit of work to the session; False once complete."""
        if self._done:
            return False
        try:
            if self._chunks is None:
                self._open()
                return True
            chunk = next(self._chunks)
            if chunk:
                self._session.receive_data(chunk)
        except StopIteration:
            self._finish(None)
            return False
        except Exception as exc:  # noqa: BLE001 - forwarded to the session
            self._finish(exc)
            return False
        return True

    def run(self) -> None:
        """Pump until the exchange completes."""
        while self.pump():
            pass

    def close(self) -> None:
        """Abort the exchange; safe from any thread and idempotent."""
        with self._lock:
            self._done = True
            response = self._response
        if response is not None:
            with suppress(Exception):
                response.close()

    def _open(self) -> None:
        response = self._client.send(self._request, stream=True)
        with self._lock:
            self._response = response
            closed_early = self._done
        if closed_early:
            with suppress(Exception):
                response.close()
            raise httpx.StreamClosed()
        self._session.receive_response(
            response.status_code,
            response.headers,
            response.reason_phrase,
            response,
        )
        self._chunks = response.iter_bytes()

    def _finish(self, error: Optional[BaseException]) -> None:
        self.close()
        self._session.complete(error)


class AsyncExchange:
    """Drive one streaming request over an ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient, request: httpx.Request, session: StreamingSession) -> None:
        self._client = client
        self._request = request
        self._session = session
        self._response: Optional[httpx.Response] = None
        self._chunks: Optional[AsyncIterator[bytes]] = None
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    async def pump(self) -> bool:
        if self._done:
            return False
        try:
            if self._chunks is None:
                await self._open()
                return True
            chunk = await self._chunks.__anext__()
            if chunk:
                self._session.receive_data(chunk)
        except StopAsyncIteration:
            await self._finish(None)
            return False
        except Exception as exc:  # noqa: BLE001 - forwarded to the session
            await self._finish(exc)
            return False
        return True

    async def run(self) -> None:
        while await self.pump():
            pass

    def mark_closed(self) -> None:
        """Synchronous half of cancellation; ``aclose`` releases the connection."""
        self._done = True

    async def aclose(self) -> None:
        self._done = True
        response, self._response = self._response, None
        if response is not None:
            with suppress(Exception):
                await response.aclose()

    async def _open(self) -> None:
        response = await self._client.send(self._request, stream=True)
        self._response = response
        if self._done:
            await self.aclose()
            raise httpx.StreamClosed()
        self._session.receive_response(
            response.status_code,
            response.headers,
            response.reason_phrase,
            response,
        )
        self._chunks = response.aiter_bytes()

    async def _finish(self, error: Optional[BaseException]) -> None:
        await self.aclose()
        self._session.complete(error)


__all__ = ["SyncExchange", "AsyncExchange"]
