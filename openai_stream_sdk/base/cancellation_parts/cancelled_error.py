"""Cancellation error type.

Defines the public ``CancelledError`` signalling that a streaming exchange or
request was cancelled by its caller.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation observes a cancellation request.

    Distinct from transport failures so callers can treat a user-initiated
    stop differently from a broken connection.
    """

__all__ = ["CancelledError"]
