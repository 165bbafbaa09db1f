"""
Normalized SDK error codes (taxonomy).

Defines the `ErrorCode` enumeration attached to every error surfaced by the
SDK. Values are lowercase snake_case and are a stable public contract for
logging and analytics. Remote errors may instead carry the server-supplied
code verbatim (for example ``"429"``), so error ``code`` fields accept plain
strings as well.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSIENT = "transient"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    TRANSPORT = "transport"
    UNKNOWN_CONTENT = "unknown_content"
    MALFORMED_PAYLOAD = "malformed_payload"
    REMOTE_ERROR = "remote_error"
    REMOTE_SERVER_MESSAGE = "remote_server_message"
    UNKNOWN_EVENT = "unknown_event"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
