"""Formatter and context helpers backing ``openai_stream_sdk.base.logging``."""

from .json_formatter import JsonFormatter, ISO
from .logging_context import LogContext

__all__ = ["JsonFormatter", "ISO", "LogContext"]
