"""Pytest configuration for the SDK test suite.

Every test runs with a clean client environment: the ``OPENAI_*`` variables
are removed, ``.env`` loading points at a file that does not exist and the
config/middleware caches are reset, so a developer's local credentials never
leak into assertions (or into a mock request).
"""

from __future__ import annotations

from typing import Iterator

import pytest

from openai_stream_sdk.base.http import close_all_clients
from openai_stream_sdk.base.middleware import MiddlewareChain, set_global_middleware
from openai_stream_sdk.config import reset_config_cache
from openai_stream_sdk.config.env import CONFIG_FILE_ENV, DOTENV_FILE_ENV, ENV_FIELD_MAP


@pytest.fixture(autouse=True)
def isolated_client_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Strip client env vars and reset cached config for the duration of a test."""

    for name in ENV_FIELD_MAP.values():
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv(CONFIG_FILE_ENV, raising=False)
    monkeypatch.setenv(DOTENV_FILE_ENV, str(tmp_path / "absent.env"))
    reset_config_cache()
    set_global_middleware(MiddlewareChain())
    yield
    reset_config_cache()
    set_global_middleware(MiddlewareChain())


@pytest.fixture(scope="session", autouse=True)
def close_pooled_clients_after_session() -> Iterator[None]:
    """Close pooled ``httpx`` clients created by tests that skip a transport."""

    yield
    close_all_clients()
