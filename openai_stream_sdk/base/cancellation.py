"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose the cancellation constructs shared by streaming sessions and the
dispatch facades via the ``openai_stream_sdk.base.cancellation`` import path.
Concrete implementations live under ``cancellation_parts``.

Notes
-----
- ``CancellationToken`` signals cancellation across a streaming exchange. A
  session registers an abort callback on the token so cancelling the token
  closes the underlying HTTP response.
- ``CancelledError`` is raised by operations that observe a cancellation
  request.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
