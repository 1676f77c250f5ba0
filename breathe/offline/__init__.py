"""
Offline Layer.

This package intercepts network requests for the app shell and serves them from
a versioned local cache, falling back to the network and back again.
"""

from .clients import Client, ClientRegistry
from .manager import CacheManager, LifecycleState
from .network import NetworkFetcher
from .strategy import FetchResult, respond

__all__ = [
    "CacheManager",
    "Client",
    "ClientRegistry",
    "FetchResult",
    "LifecycleState",
    "NetworkFetcher",
    "respond",
]
