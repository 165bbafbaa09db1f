"""openai_stream_sdk.config.env
=============================

Environment variable names and small helpers for client credentials.

Failure Modes
-------------
Helpers never raise on unset variables; callers decide how to proceed
(e.g., fall back to the config file or fail at request time).
"""

from __future__ import annotations

import os
from typing import Dict, Optional

# Client config field -> environment variable
ENV_FIELD_MAP: Dict[str, str] = {
    "api_key": "OPENAI_API_KEY",  # pragma: allowlist secret - env var name, not a secret
    "base_url": "OPENAI_BASE_URL",
    "organization": "OPENAI_ORGANIZATION",
    "model": "OPENAI_MODEL",
}

CONFIG_FILE_ENV = "OPENAI_SDK_CONFIG_FILE"
DOTENV_FILE_ENV = "DOTENV_FILE"


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    'test_'. The check is case-insensitive and resilient to surrounding spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def resolve_api_key() -> Optional[str]:
    """Return the API key from the environment, ignoring placeholder values."""
    val = os.environ.get(ENV_FIELD_MAP["api_key"])
    if not val or is_placeholder(val):
        return None
    return val


def env_overrides() -> Dict[str, str]:
    """Collect the client config fields set in the environment."""
    out: Dict[str, str] = {}
    for field, name in ENV_FIELD_MAP.items():
        val = os.getenv(name)
        if val is not None and val.strip():
            out[field] = val.strip()
    return out


__all__ = [
    "ENV_FIELD_MAP",
    "CONFIG_FILE_ENV",
    "DOTENV_FILE_ENV",
    "is_placeholder",
    "resolve_api_key",
    "env_overrides",
]
