"""CLI action handlers.

Purpose
-------
Subcommand handlers for the SDK command line, keeping the entrypoint minimal.
This module has no top-level side effects and is safe to import in tests.

Fallback & Error Semantics
--------------------------
- Missing API key: exit code ``2`` with a JSON hint on stderr, no network I/O.
- SDK errors (``OpenAIError``): exit code ``1`` with ``{"error", "code"}``
  JSON on stderr and a normalized ``cli.error`` log event.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Callable, List, Optional

from ..base.errors import HTTPStatusError, OpenAIError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.middleware import InspectorMiddleware, OpenAIMiddleware
from ..base.models import ChatMessage, ChatQuery
from ..client import OpenAIClient
from ..config import ClientConfig, get_client_config
from ..config.env import ENV_FIELD_MAP

ClientFactory = Callable[[ClientConfig, List[OpenAIMiddleware]], OpenAIClient]


def default_client_factory(config: ClientConfig, middlewares: List[OpenAIMiddleware]) -> OpenAIClient:
    return OpenAIClient(config, middlewares=middlewares)


def _print_error(err: OpenAIError) -> None:
    payload = {"error": err.message, "code": err.code_value}
    if isinstance(err, HTTPStatusError):
        payload["status"] = err.status
    print(json.dumps(payload), file=sys.stderr)


def _resolve(args: argparse.Namespace) -> Optional[ClientConfig]:
    """Return the merged config, or ``None`` after printing a missing-key hint."""
    config = get_client_config({"api_key": args.api_key, "base_url": args.base_url})
    if not config.api_key:
        hint = {"error": "missing API key", "set_env": ENV_FIELD_MAP["api_key"]}
        print(json.dumps(hint), file=sys.stderr)
        return None
    return config


def _middlewares(args: argparse.Namespace) -> List[OpenAIMiddleware]:
    if not args.inspect:
        return []
    return [InspectorMiddleware(label="cli", debug_handler=lambda line: print(line, file=sys.stderr))]


def _query(args: argparse.Namespace, config: ClientConfig) -> ChatQuery:
    messages = []
    if args.system:
        messages.append(ChatMessage(role="system", content=args.system))
    messages.append(ChatMessage(role="user", content=args.prompt))
    return ChatQuery(
        model=args.model or config.model,
        messages=messages,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
    )


def handle_chat(args: argparse.Namespace, *, client_factory: ClientFactory = default_client_factory) -> int:
    """Execute the ``chat`` subcommand (single completion)."""
    config = _resolve(args)
    if config is None:
        return 2
    query = _query(args, config)
    logger = get_logger("openai_stream_sdk.cli")
    ctx = LogContext(endpoint="cli.chat", model=query.model)
    normalized_log_event(logger, "cli.start", ctx, phase="start", attempt=1, emitted=None, tokens=None)
    try:
        with client_factory(config, _middlewares(args)) as client:
            result = client.chats(query)
    except OpenAIError as e:
        normalized_log_event(
            logger, "cli.error", ctx, phase="finalize", error_code=e.code_value, emitted=False, tokens=None
        )
        _print_error(e)
        return 1
    if args.json:
        print(result.model_dump_json())
    else:
        print(result.text)
    usage = result.usage.model_dump() if result.usage else None
    normalized_log_event(logger, "cli.finalize", ctx, phase="finalize", emitted=bool(result.text), tokens=usage)
    return 0


def handle_stream(args: argparse.Namespace, *, client_factory: ClientFactory = default_client_factory) -> int:
    """Execute the ``stream`` subcommand, printing deltas as they arrive.

    With ``--json`` every chunk is printed as one JSON line instead.
    """
    config = _resolve(args)
    if config is None:
        return 2
    query = _query(args, config)
    logger = get_logger("openai_stream_sdk.cli")
    ctx = LogContext(endpoint="cli.stream", model=query.model)
    normalized_log_event(logger, "cli.start", ctx, phase="start", attempt=1, emitted=None, tokens=None)
    emitted = False
    try:
        with client_factory(config, _middlewares(args)) as client:
            with client.chats_stream(query) as stream:
                for chunk in stream:
                    if args.json:
                        print(chunk.model_dump_json(), flush=True)
                    elif chunk.delta_text:
                        print(chunk.delta_text, end="", flush=True)
                    emitted = emitted or bool(chunk.delta_text)
    except OpenAIError as e:
        if emitted and not args.json:
            print()
        normalized_log_event(
            logger, "cli.error", ctx, phase="finalize", error_code=e.code_value, emitted=emitted, tokens=None
        )
        _print_error(e)
        return 1
    if not args.json:
        print()
    normalized_log_event(logger, "cli.finalize", ctx, phase="finalize", emitted=emitted, tokens=None)
    return 0


def handle_models(args: argparse.Namespace, *, client_factory: ClientFactory = default_client_factory) -> int:
    """Execute the ``models`` subcommand."""
    config = _resolve(args)
    if config is None:
        return 2
    try:
        with client_factory(config, _middlewares(args)) as client:
            result = client.models()
    except OpenAIError as e:
        _print_error(e)
        return 1
    if args.json:
        print(json.dumps({"models": [m.id for m in result.data]}))
    else:
        for m in sorted(result.data, key=lambda m: m.id):
            print(m.id)
    return 0


__all__ = [
    "ClientFactory",
    "default_client_factory",
    "handle_chat",
    "handle_stream",
    "handle_models",
]
