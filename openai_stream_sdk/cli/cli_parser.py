"""CLI parser construction for ``openai-sdk``.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions`` to keep files small and testable.
"""

from __future__ import annotations

import argparse

from ..config.defaults import CLI_DEFAULT_PROMPT


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--base-url", default=None, help="API base URL (overrides config and env)")
    parser.add_argument("--api-key", default=None, help="API key (overrides OPENAI_API_KEY)")
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    parser.add_argument(
        "--inspect", action="store_true", help="Log requests, stream data and responses to stderr"
    )


def _add_prompt(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--model", default=None)
    parser.add_argument("--prompt", default=CLI_DEFAULT_PROMPT)
    parser.add_argument("--system", default=None, help="Optional system message")
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--max-tokens", type=int, default=None)


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser and subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with ``chat``, ``stream`` and ``models`` subcommands.
    """
    p = argparse.ArgumentParser(prog="openai-sdk", description="Chat completions SDK command line")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_chat = sub.add_parser("chat", help="Send one prompt and print the completion")
    _add_prompt(p_chat)
    _add_common(p_chat)

    p_stream = sub.add_parser("stream", help="Stream a completion token by token")
    _add_prompt(p_stream)
    _add_common(p_stream)

    p_models = sub.add_parser("models", help="List available models")
    _add_common(p_models)

    return p


__all__ = ["build_parser"]
