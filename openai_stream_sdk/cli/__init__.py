"""SDK command line (package entrypoint).

This package wires argument parsing to action handlers kept in small, focused
modules. It performs no request logic directly.

Public API re-exports:
- ``main``: CLI entrypoint callable
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_actions import ClientFactory, default_client_factory, handle_chat, handle_models, handle_stream
from .cli_parser import build_parser


def main(argv: Optional[list[str]] = None, *, client_factory: ClientFactory = default_client_factory) -> int:
	"""CLI entrypoint.

	Parameters
	----------
	argv: Optional[list[str]]
		Argument vector; when ``None`` uses ``sys.argv[1:]``.
	client_factory: ClientFactory
		Builds the client from the resolved config (tests inject a mock transport).

	Returns
	-------
	int
		Process exit code (0 success, 1 request failure, 2 usage or missing key).
	"""
	args = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
	if args.cmd == "models":
		return handle_models(args, client_factory=client_factory)
	if args.cmd == "stream":
		return handle_stream(args, client_factory=client_factory)
	return handle_chat(args, client_factory=client_factory)


__all__ = ["main", "build_parser"]


if __name__ == "__main__":  # pragma: no cover
	raise SystemExit(main())
