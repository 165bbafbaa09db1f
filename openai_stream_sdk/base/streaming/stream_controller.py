"""Cancellable iterators over a streaming exchange.

:class:`StreamController` (sync) and :class:`AsyncStreamController` (async)
wrap a :class:`StreamingSession` and its exchange driver behind a lazy
sequence of typed events:

* Iterating pulls network chunks only when no decoded event is waiting.
* The first processing error (``RemoteError``, ``MalformedPayloadError``,
  ``HTTPStatusError``, ...) is raised from the iterator after every event
  decoded before it, and terminates the request. A transport failure is
  raised as ``TransportError``. Exactly one terminal signal is produced.
* ``cancel(reason)`` aborts the exchange, discards buffered stream data and
  suppresses further callbacks. Iteration then stops quietly and ``error``
  reports a ``StreamCancelledError``.
"""
from __future__ import annotations

import threading
from collections import deque
from typing import TYPE_CHECKING, Any, Deque, Generic, Iterator, Optional, Tuple, TypeVar

from ..cancellation import CancellationToken
from ..errors import OpenAIError, StreamCancelledError, wrap_transport_exception
from .streaming_session import StreamingSession

if TYPE_CHECKING:
    from ..http.exchange import AsyncExchange, SyncExchange

T = TypeVar("T")

_EVENT = "event"
_ERROR = "error"


class _ControllerCore(Generic[T]):
    """Queue and terminal-state bookkeeping shared by both controllers."""

    def __init__(self, token: Optional[CancellationToken]) -> None:
        self._token = token or CancellationToken()
        self._queue: Deque[Tuple[str, Any]] = deque()
        self._queue_lock = threading.Lock()
        self._error: Optional[OpenAIError] = None
        self._failed = False
        self._finished = False
        self._session: Optional[StreamingSession[T]] = None

    def _bind(self, session: StreamingSession[T]) -> None:
        self._session = session
        self._token.add_callback(self._on_token_cancelled)

    def _release_token(self) -> None:
        """Detach from the token once iteration is over; the token may outlive the stream."""
        self._token.remove_callback(self._on_token_cancelled)

    # session callbacks ----------------------------------------------------
    def _on_content(self, _session: StreamingSession[T], obj: T) -> None:
        with self._queue_lock:
            if not self._failed:
                self._queue.append((_EVENT, obj))

    def _on_processing_error(self, session: StreamingSession[T], error: OpenAIError) -> None:
        with self._queue_lock:
            if self._failed:
                return
            self._failed = True
            self._error = error
            self._queue.append((_ERROR, error))
        # First error terminates the logical request.
        session.cancel("processing error")
        self._abort_exchange()

    def _on_complete(self, _session: StreamingSession[T], error: Optional[BaseException]) -> None:
        with self._queue_lock:
            if error is None or self._failed:
                return
            wrapped = wrap_transport_exception(error)
            self._failed = True
            self._error = wrapped
            self._queue.append((_ERROR, wrapped))

    def _on_token_cancelled(self, reason: Optional[str]) -> None:
        with self._queue_lock:
            if self._error is None and not self._finished:
                self._error = StreamCancelledError(message=reason or "stream cancelled", reason=reason)
            self._queue.clear()
        if self._session is not None:
            self._session.cancel(reason)
        self._abort_exchange()

    def _abort_exchange(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    # iteration helpers ----------------------------------------------------
    def _next_ready(self) -> Tuple[bool, Any]:
        """Pop the next queued item: ``(True, obj)`` or raises the terminal error."""
        with self._queue_lock:
            if not self._queue:
                return False, None
            kind, item = self._queue.popleft()
        if kind == _ERROR:
            self._finished = True
            self._release_token()
            raise item
        return True, item

    # public API -------------------------------------------------------------
    def cancel(self, reason: str | None = None) -> None:
        """Cancel the stream. Safe to call repeatedly, from any thread, or after completion."""
        self._token.cancel(reason)

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    @property
    def finished(self) -> bool:  # noqa: D401 - short property
        """Whether iteration reached its terminal state."""
        return self._finished

    @property
    def done_received(self) -> bool:
        """Whether the server sent the ``[DONE]`` sentinel."""
        return self._session is not None and self._session.finished

    @property
    def error(self) -> Optional[OpenAIError]:  # noqa: D401 - short property
        """Terminal error (``StreamCancelledError`` after cancel), if any."""
        return self._error

    @property
    def session(self) -> Optional[StreamingSession[T]]:
        return self._session


class StreamController(_ControllerCore[T]):
    """Synchronous iterator of typed stream events."""

    def __init__(self, token: CancellationToken | None = None) -> None:
        super().__init__(token)
        self._exchange: Optional["SyncExchange"] = None

    def attach(self, session: StreamingSession[T], exchange: "SyncExchange") -> None:
        self._exchange = exchange
        self._bind(session)

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        while True:
            ready, item = self._next_ready()
            if ready:
                return item
            if self._finished or self._token.cancelled or self._exchange is None or self._exchange.done:
                self._finished = True
                self._release_token()
                raise StopIteration
            self._exchange.pump()

    def close(self) -> None:
        """Release the connection without marking the stream as cancelled by the user."""
        self._finished = True
        self._release_token()
        if self._exchange is not None:
            self._exchange.close()

    def __enter__(self) -> "StreamController[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _abort_exchange(self) -> None:
        if self._exchange is not None:
            self._exchange.close()


class AsyncStreamController(_ControllerCore[T]):
    """Asynchronous iterator of typed stream events.

    ``cancel`` is synchronous; the connection itself is released on the next
    ``__anext__`` or by ``aclose``.
    """

    def __init__(self, token: CancellationToken | None = None) -> None:
        super().__init__(token)
        self._exchange: Optional["AsyncExchange"] = None

    def attach(self, session: StreamingSession[T], exchange: "AsyncExchange") -> None:
        self._exchange = exchange
        self._bind(session)

    def __aiter__(self) -> "AsyncStreamController[T]":
        return self

    async def __anext__(self) -> T:
        while True:
            try:
                ready, item = self._next_ready()
            except OpenAIError:
                await self.aclose()
                raise
            if ready:
                return item
            if self._finished or self._token.cancelled or self._exchange is None or self._exchange.done:
                await self.aclose()
                raise StopAsyncIteration
            await self._exchange.pump()

    async def aclose(self) -> None:
        self._finished = True
        self._release_token()
        if self._exchange is not None:
            await self._exchange.aclose()

    async def __aenter__(self) -> "AsyncStreamController[T]":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _abort_exchange(self) -> None:
        if self._exchange is not None:
            self._exchange.mark_closed()


__all__ = ["StreamController", "AsyncStreamController"]
