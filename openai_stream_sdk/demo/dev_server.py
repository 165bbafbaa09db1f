from __future__ import annotations

import os
import uvicorn


def _parse_port(value: str | None, default: int) -> int:
    """Best-effort parse of a port from string, falling back to a sane default."""
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def main() -> None:
    """Start the development server for the demo chat app.

    - DEMO_SERVICE_HOST: interface to bind (default "127.0.0.1")
    - DEMO_SERVICE_PORT: port to bind (default 8091)
    - DEMO_SERVICE_RELOAD: "true"/"false" to toggle auto-reload (default false)
    """
    host = os.getenv("DEMO_SERVICE_HOST", "127.0.0.1")
    port = _parse_port(os.getenv("DEMO_SERVICE_PORT"), 8091)
    reload_enabled = os.getenv("DEMO_SERVICE_RELOAD", "false").lower() == "true"

    uvicorn.run(
        "openai_stream_sdk.demo.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
