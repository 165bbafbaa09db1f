"""Structured logging context object for the SDK.

This module defines :class:`LogContext`, a dataclass carrying the common
fields attached to SDK logging events (endpoint, model, stream id, HTTP
status, extra metadata). ``to_dict`` merges the ``extra`` mapping and prunes
``None`` values for clean structured output.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for SDK logging events."""

    endpoint: Optional[str] = None
    model: Optional[str] = None
    stream_id: Optional[str] = None
    status_code: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
