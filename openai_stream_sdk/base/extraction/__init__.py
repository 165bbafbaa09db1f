"""Error payload extraction: quote-aware scanning, layered extraction, cleanup."""

from .error_extractor import (
    ErrorPayloadExtractor,
    ExtractedError,
    MessageSelector,
    extract_error,
    first_message,
    shortest_message,
)
from .message_cleanup import GENERIC_ERROR_MESSAGE, clean_error_message
from .quote_scanner import looks_truncated

__all__ = [
    "ErrorPayloadExtractor",
    "ExtractedError",
    "MessageSelector",
    "extract_error",
    "first_message",
    "shortest_message",
    "GENERIC_ERROR_MESSAGE",
    "clean_error_message",
    "looks_truncated",
]
