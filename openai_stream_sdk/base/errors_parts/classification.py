"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements HTTP status mapping, ``httpx`` transport exception mapping and a
message-based heuristic fallback. :func:`wrap_transport_exception` is what the
facades use so raw transport exceptions never reach callers.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Dict

import httpx

from ..cancellation import CancelledError
from .error_code import ErrorCode
from .openai_error import OpenAIError
from .stream_errors import StreamCancelledError, TransportError


def _extract_status(exc: Exception) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    # httpx raises RuntimeError from ``.response`` when no response is bound.
    try:
        resp = getattr(exc, "response", None)
    except RuntimeError:
        resp = None
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def code_for_status(status: int) -> ErrorCode:
    """Map an HTTP status to an :class:`ErrorCode` (5xx default ``server_error``)."""
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    if status >= 400:
        return ErrorCode.VALIDATION
    return ErrorCode.UNKNOWN


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without a status."""
    PATTERN_GROUPS = (
        (ErrorCode.TIMEOUT, ("timeout",)),
        (ErrorCode.TIMEOUT, ("timed out",)),
        (ErrorCode.AUTH, ("unauthorized",)),
        (ErrorCode.AUTH, ("api key",)),
        (ErrorCode.NOT_FOUND, ("not found",)),
        (ErrorCode.UNAVAILABLE, ("unavailable",)),
        (ErrorCode.TRANSPORT, ("connection reset",)),
        (ErrorCode.TRANSPORT, ("connection refused",)),
    )
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    for code, patterns in PATTERN_GROUPS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ``OpenAIError`` passthrough (when its code is an ``ErrorCode``).
        2. Cancellation.
        3. Timeout exceptions (``httpx``, builtin, asyncio).
        4. Other ``httpx`` transport exceptions.
        5. HTTP status mapping.
        6. Substring heuristics.
        7. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, OpenAIError) and isinstance(exc.code, ErrorCode):
        return exc.code
    if isinstance(exc, (CancelledError, asyncio.CancelledError)):
        return ErrorCode.CANCELLED
    if isinstance(exc, (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSPORT
    if isinstance(exc, Exception):
        status = _extract_status(exc)
        if status is not None:
            return code_for_status(status)
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


def wrap_transport_exception(exc: BaseException) -> OpenAIError:
    """Return ``exc`` as an :class:`OpenAIError` suitable for callers.

    SDK errors pass through unchanged; cancellation becomes
    :class:`StreamCancelledError`; everything else becomes a
    :class:`TransportError` carrying the classified code and the original
    exception in ``raw``.
    """
    if isinstance(exc, OpenAIError):
        return exc
    code = classify_exception(exc)
    if code is ErrorCode.CANCELLED:
        reason = str(exc) or None
        return StreamCancelledError(message=reason or "stream cancelled", reason=reason, raw=exc)
    return TransportError(code=code, message=str(exc) or type(exc).__name__, raw=exc)


__all__ = [
    "classify_exception",
    "code_for_status",
    "wrap_transport_exception",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
