"""Run the SDK command line via ``python -m openai_stream_sdk``."""

from __future__ import annotations

from .cli import main


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
