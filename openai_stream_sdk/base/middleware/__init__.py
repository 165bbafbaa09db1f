"""Exchange middleware: hook base class, chain, global registry, inspector."""

from .middleware_base import OpenAIMiddleware
from .chain import MiddlewareChain
from .registry import get_middleware_chain, set_global_middleware
from .inspector import InspectorMiddleware

__all__ = [
    "OpenAIMiddleware",
    "MiddlewareChain",
    "get_middleware_chain",
    "set_global_middleware",
    "InspectorMiddleware",
]
