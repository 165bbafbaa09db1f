"""openai_stream_sdk.config.defaults
=================================

Central place for small, stable default values used by the client, the demo
service and the CLI. These defaults can be overridden via environment
variables or an external configuration file, but provide sensible fallbacks
for local development and tests.

This module intentionally avoids importing from other SDK packages to prevent
circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- API ----
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
# Model used by the CLI and demo when neither config nor env select one.
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
# Prefix of the Authorization header value.
OPENAI_AUTH_SCHEME = "Bearer"
ORGANIZATION_HEADER = "OpenAI-Organization"
# Assistants and threads endpoints are gated behind a beta header.
ASSISTANTS_BETA_HEADER = "OpenAI-Beta"
ASSISTANTS_BETA_VALUE = "assistants=v2"

# ---- Demo service ----
# Comma-separated list of allowed origins for the demo dev server.
DEMO_SERVICE_CORS_DEFAULT_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"
DEMO_DEFAULT_SYSTEM_MESSAGE = "You are a helpful assistant."

# ---- CLI ----
CLI_DEFAULT_PROMPT = "Say hello in one short sentence."

__all__ = [
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_MODEL",
    "OPENAI_AUTH_SCHEME",
    "ORGANIZATION_HEADER",
    "ASSISTANTS_BETA_HEADER",
    "ASSISTANTS_BETA_VALUE",
    "DEMO_SERVICE_CORS_DEFAULT_ORIGINS",
    "DEMO_DEFAULT_SYSTEM_MESSAGE",
    "CLI_DEFAULT_PROMPT",
]
