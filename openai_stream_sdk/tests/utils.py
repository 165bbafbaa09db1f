"""Shared testing utilities for the SDK test suite.

Purpose:
    Avoid duplication of simple assertion helpers across test modules while
    retaining explicit AssertionError semantics (eschewing bare `assert` to
    satisfy Bandit B101).

Exports:
    - assert_true(condition: bool, message: str) -> None
    - ListHandler: logging handler collecting formatted messages
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List


def assert_true(condition: bool, message: str) -> None:
    """Raise AssertionError with the provided message if condition is False.

    Parameters
    ----------
    condition: bool
        Boolean expression under test.
    message: str
        Rich, contextual diagnostic message to display on failure.
    """
    if not condition:
        raise AssertionError(message)


class ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - exercised via tests
        self.messages.append(record.getMessage())

    def events(self) -> List[Dict[str, Any]]:
        """Structured payloads of every captured JSON message."""
        out: List[Dict[str, Any]] = []
        for msg in self.messages:
            try:
                out.append(json.loads(msg))
            except ValueError:
                continue
        return out


def capture_logger(name: str) -> "tuple[logging.Logger, ListHandler]":
    """Return a DEBUG logger named ``name`` writing only to a fresh ListHandler."""
    logger = logging.getLogger(name)
    handler = ListHandler()
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, handler
