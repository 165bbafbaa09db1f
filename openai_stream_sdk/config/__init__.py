"""Unified configuration layer for the client.

Goals
-----
* Centralize defaults (base URL, model).
* Merge sources in a predictable order:
    1. Built-in defaults
    2. Optional external JSON config file pointed to by OPENAI_SDK_CONFIG_FILE
    3. Environment variables (OPENAI_API_KEY, OPENAI_BASE_URL,
       OPENAI_ORGANIZATION, OPENAI_MODEL)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_client_config(overrides)``.

External Config File (Optional)
-------------------------------
A flat JSON object; unknown keys are ignored::

    {
      "base_url": "https://api.openai.com/v1",
      "model": "gpt-4o-mini",
      "organization": "org-123",
      "headers": {"X-Trace": "on"}
    }

Public API
----------
* get_client_config(overrides: dict | None = None) -> ClientConfig
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .defaults import OPENAI_DEFAULT_BASE_URL, OPENAI_DEFAULT_MODEL
from .env import CONFIG_FILE_ENV, DOTENV_FILE_ENV, env_overrides, is_placeholder

DEFAULTS: Dict[str, Any] = {
    "base_url": OPENAI_DEFAULT_BASE_URL,
    "model": OPENAI_DEFAULT_MODEL,
}

_FIELDS = ("api_key", "base_url", "organization", "model", "headers")

_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


@dataclass(frozen=True)
class ClientConfig:
    """Resolved client settings.

    ``api_key`` stays ``None`` when only a placeholder value was found, so a
    request fails with an authentication error instead of sending a dummy key.
    """

    base_url: str = OPENAI_DEFAULT_BASE_URL
    model: str = OPENAI_DEFAULT_MODEL
    api_key: Optional[str] = None
    organization: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClientConfig":
        key = data.get("api_key")
        headers = data.get("headers") or {}
        return cls(
            base_url=str(data.get("base_url") or OPENAI_DEFAULT_BASE_URL).rstrip("/"),
            model=str(data.get("model") or OPENAI_DEFAULT_MODEL),
            api_key=None if not key or is_placeholder(key) else str(key),
            organization=data.get("organization") or None,
            headers={str(k): str(v) for k, v in dict(headers).items()},
        )


def _load_dotenv_once() -> None:
    """Lightweight .env loader (no external dependency).

    Parses KEY=VALUE lines, ignoring comments and blank lines. Safe to call
    multiple times. Overrides existing environment variables only if their
    current values appear to be placeholders.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv(DOTENV_FILE_ENV, ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv(CONFIG_FILE_ENV)
    if not path or not Path(path).is_file():
        _FILE_CACHE = {}
        return _FILE_CACHE
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError):
        data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = {k: v for k, v in data.items() if k in _FIELDS}
    return _FILE_CACHE


def reset_config_cache() -> None:
    """Forget the cached config file and ``.env`` state (tests, reloads)."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


def get_client_config(overrides: Optional[Mapping[str, Any]] = None) -> ClientConfig:
    """Return the merged client configuration.

    Merge order (later wins): defaults -> config file -> env vars -> overrides.
    ``None`` values in ``overrides`` are ignored.
    """
    _load_dotenv_once()
    cfg: Dict[str, Any] = dict(DEFAULTS)
    cfg |= _load_external_config()
    cfg |= env_overrides()
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None and k in _FIELDS}
    return ClientConfig.from_mapping(cfg)


__all__ = [
    "ClientConfig",
    "DEFAULTS",
    "get_client_config",
    "reset_config_cache",
    "is_placeholder",
]
