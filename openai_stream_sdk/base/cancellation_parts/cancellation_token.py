"""Cooperative cancellation token implementation.

Exposes ``CancellationToken``: a thread-safe flag with cascading children and
abort callbacks. Streaming sessions register a callback that closes the HTTP
response so cancellation interrupts a blocked read instead of waiting for the
next chunk.
"""

from __future__ import annotations

from contextlib import suppress
from threading import Lock
from typing import Callable, List, Optional

from .state import State
from .cancelled_error import CancelledError


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Thread-safe for ``cancel``, ``add_callback``, ``remove_callback`` and
    ``raise_if_cancelled``.
    Child tokens inherit cancellation when the parent is cancelled.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation, run abort callbacks, cascade to children.

        Only the first call has an effect. Callbacks run outside the lock and
        a failing callback does not prevent the remaining ones from running.
        """
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            callbacks = list(self._state.callbacks)
            self._state.callbacks.clear()
            children = list(self._children)
        for cb in callbacks:
            with suppress(Exception):
                cb(reason)
        for child in children:
            child.cancel(reason)

    def add_callback(self, callback: Callable[[Optional[str]], None]) -> None:
        """Register ``callback(reason)``; runs immediately when already cancelled."""
        with self._lock:
            if not self._state.cancelled:
                self._state.callbacks.append(callback)
                return
            reason = self._state.reason
        callback(reason)

    def remove_callback(self, callback: Callable[[Optional[str]], None]) -> None:
        """Unregister ``callback``; a no-op when it already ran or was never added."""
        with self._lock:
            with suppress(ValueError):
                self._state.callbacks.remove(callback)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
        if should_cancel:
            token.cancel(reason)
        return token

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if the token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def child(self) -> "CancellationToken":
        return CancellationToken(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, children={len(self._children)})"
        )


__all__ = ["CancellationToken"]
