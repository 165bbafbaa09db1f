"""Timeout configuration for SDK HTTP exchanges.

Timeouts are transport concerns: the streaming interpreter never tracks
deadlines itself. Elapsed deadlines surface as ``httpx.TimeoutException`` and
are converted to ``TransportError(code=timeout)`` at the facade boundary.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values in seconds.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use and again only when the relevant variables change. Supported
    environment variables (all optional):
        OPENAI_SDK_TIMEOUT_CONNECT_SECONDS
        OPENAI_SDK_TIMEOUT_STREAM_SECONDS
        OPENAI_SDK_TIMEOUT_HTTP_SECONDS

to_httpx_timeout(config, streaming)
    Builds the ``httpx.Timeout`` used by the pooled clients. Streaming
    exchanges use the stream idle timeout as the read timeout.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

import httpx


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Timeout for establishing the TCP/TLS
            connection to the API.
        stream_timeout_seconds: Idle timeout while waiting for the next chunk
            of a streaming response.
        http_timeout_seconds: Read timeout for regular (non-streaming)
            requests.
    """

    connect_timeout_seconds: float = 10.0
    stream_timeout_seconds: float = 60.0
    http_timeout_seconds: float = 30.0


_ENV_NAMES = (
    "OPENAI_SDK_TIMEOUT_CONNECT_SECONDS",
    "OPENAI_SDK_TIMEOUT_STREAM_SECONDS",
    "OPENAI_SDK_TIMEOUT_HTTP_SECONDS",
)

_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float; ``default`` when unset or invalid."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`.

    The cache is refreshed when any ``OPENAI_SDK_TIMEOUT_*`` variable changes
    so tests can adjust values at runtime through ``monkeypatch.setenv``.
    """
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    cur_guard = "/".join(os.getenv(name, "") for name in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == cur_guard:
        return _CACHED

    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.connect_timeout_seconds),
        stream_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.stream_timeout_seconds),
        http_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.http_timeout_seconds),
    )
    _ENV_GUARD = cur_guard
    return _CACHED


def to_httpx_timeout(config: TimeoutConfig | None = None, *, streaming: bool = False) -> httpx.Timeout:
    cfg = config or get_timeout_config()
    read = cfg.stream_timeout_seconds if streaming else cfg.http_timeout_seconds
    return httpx.Timeout(read, connect=cfg.connect_timeout_seconds)


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "to_httpx_timeout",
]
