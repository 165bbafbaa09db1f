"""HTTP utilities package: pooled httpx clients and exchange drivers."""

from .client import STREAM_PURPOSE, close_all_clients, get_httpx_client, new_async_client
from .exchange import AsyncExchange, SyncExchange

__all__ = [
    "get_httpx_client",
    "new_async_client",
    "close_all_clients",
    "STREAM_PURPOSE",
    "SyncExchange",
    "AsyncExchange",
]
