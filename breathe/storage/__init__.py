"""
Storage Layer.

This package handles all data persistence: the preference store, the INI
configuration file and the versioned response caches.
"""

from .cache_storage import (
    CacheStorage,
    CacheStore,
    FileCacheStorage,
    MemoryCacheStorage,
)
from .config_manager import ConfigManager
from .local_storage import LocalStorage

__all__ = [
    "CacheStorage",
    "CacheStore",
    "ConfigManager",
    "FileCacheStorage",
    "LocalStorage",
    "MemoryCacheStorage",
]
