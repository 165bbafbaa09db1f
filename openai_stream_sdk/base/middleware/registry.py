"""Global middleware chain registry.

Clients combine the global chain with their own per-client middleware, so
process-wide concerns (for example an inspector in a debugging session) can
be installed once.
"""

from __future__ import annotations

from .chain import MiddlewareChain

_GLOBAL_CHAIN: MiddlewareChain = MiddlewareChain(items=[])


def set_global_middleware(chain: MiddlewareChain) -> None:
    """Set the global middleware chain used by every client.

    Side effects:
        Mutates module-level state to point to the provided chain.
    """

    global _GLOBAL_CHAIN
    _GLOBAL_CHAIN = chain


def get_middleware_chain() -> MiddlewareChain:
    """Return the global middleware chain (empty by default)."""

    return _GLOBAL_CHAIN


__all__ = ["set_global_middleware", "get_middleware_chain"]
