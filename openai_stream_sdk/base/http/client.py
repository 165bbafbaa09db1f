"""Shared HTTP client pool for the SDK.

Purpose:
    Provide a centralized, thread-safe pool of reusable ``httpx.Client``
    instances so repeated requests reuse connections. Timeouts derive
    exclusively from :func:`get_timeout_config`.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client.

Timeout strategy:
    - Clients for the ``"stream"`` purpose use the stream idle timeout as
      their read timeout; every other purpose uses the regular HTTP timeout.
      Values are read when a client is first created.

Lifecycle & cleanup:
    - Clients are cached by ``(base_url, purpose)``.
    - All clients are closed at interpreter exit via ``atexit``. Tests may
      call :func:`close_all_clients` explicitly.
    - ``httpx.AsyncClient`` instances are bound to an event loop and are
      therefore not pooled; :func:`new_async_client` creates one per owner.
"""

from __future__ import annotations

import atexit
import threading
from contextlib import suppress
from typing import Dict, Optional, Tuple

import httpx

from ..timeouts import to_httpx_timeout

STREAM_PURPOSE = "stream"

_CLIENTS: Dict[Tuple[Optional[str], str], httpx.Client] = {}
_LOCK = threading.RLock()


def get_httpx_client(base_url: Optional[str], purpose: str) -> httpx.Client:
    """Return a pooled ``httpx.Client`` for the given base URL and purpose.

    Parameters:
        base_url: API base URL set on the client so callers can use relative
            paths. ``None`` groups clients under a shared key.
        purpose: Short pool discriminator, ``"stream"`` or ``"http"``.

    Thread-safety:
        Safe for concurrent use; per-key creation is guarded by a lock.
    """
    key = (base_url, purpose)
    client = _CLIENTS.get(key)
    if client is not None and not client.is_closed:
        return client

    with _LOCK:
        client = _CLIENTS.get(key)
        if client is not None and not client.is_closed:
            return client
        timeout = to_httpx_timeout(streaming=purpose == STREAM_PURPOSE)
        client = httpx.Client(base_url=base_url, timeout=timeout) if base_url else httpx.Client(timeout=timeout)
        _CLIENTS[key] = client
        return client


def new_async_client(base_url: Optional[str], *, streaming: bool = True) -> httpx.AsyncClient:
    timeout = to_httpx_timeout(streaming=streaming)
    if base_url:
        return httpx.AsyncClient(base_url=base_url, timeout=timeout)
    return httpx.AsyncClient(timeout=timeout)


def close_all_clients() -> None:
    """Close and clear all pooled HTTP clients (best effort)."""
    with _LOCK:
        for c in _CLIENTS.values():
            with suppress(Exception):
                c.close()
        _CLIENTS.clear()


atexit.register(close_all_clients)

__all__ = ["get_httpx_client", "new_async_client", "close_all_clients", "STREAM_PURPOSE"]
