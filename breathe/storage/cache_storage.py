"""
Named, versioned response caches.

A `CacheStorage` holds any number of `CacheStore`s, each mapping a request URL to
a cached response. The in-memory backend is used for tests and ephemeral runs;
the file backend keeps one directory per store with a JSON file per entry.
"""

import asyncio
import base64
import hashlib
import json
import logging
import os
import shutil
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles

from breathe.models.http import Response, ResponseType, cache_key

log = logging.getLogger(__name__)


class CacheStore(ABC):
    """A single named cache mapping request URLs to responses."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def match(self, url: str) -> Response | None: ...

    @abstractmethod
    async def put(self, url: str, response: Response) -> None: ...

    @abstractmethod
    async def delete(self, url: str) -> bool: ...

    @abstractmethod
    async def keys(self) -> list[str]: ...

    async def put_all(self, entries: dict[str, Response]) -> None:
        for url, response in entries.items():
            await self.put(url, response)


class CacheStorage(ABC):
    """The collection of all cache stores, in creation order."""

    @abstractmethod
    async def open(self, name: str) -> CacheStore:
        """Returns the named store, creating it if needed."""

    @abstractmethod
    async def has(self, name: str) -> bool: ...

    @abstractmethod
    async def keys(self) -> list[str]: ...

    @abstractmethod
    async def delete(self, name: str) -> bool: ...


class MemoryCacheStore(CacheStore):
    def __init__(self, name: str):
        super().__init__(name)
        self._entries: dict[str, Response] = {}

    async def match(self, url: str) -> Response | None:
        response = self._entries.get(cache_key(url))
        return response.clone() if response is not None else None

    async def put(self, url: str, response: Response) -> None:
        self._entries[cache_key(url)] = response.clone()

    async def delete(self, url: str) -> bool:
        return self._entries.pop(cache_key(url), None) is not None

    async def keys(self) -> list[str]:
        return list(self._entries)


class MemoryCacheStorage(CacheStorage):
    def __init__(self) -> None:
        self._stores: dict[str, MemoryCacheStore] = {}

    async def open(self, name: str) -> CacheStore:
        if name not in self._stores:
            self._stores[name] = MemoryCacheStore(name)
        return self._stores[name]

    async def has(self, name: str) -> bool:
        return name in self._stores

    async def keys(self) -> list[str]:
        return list(self._stores)

    async def delete(self, name: str) -> bool:
        return self._stores.pop(name, None) is not None


def _hash(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()  # noqa: S324


class FileCacheStore(CacheStore):
    """Stores each entry as `<md5(url)>.json` inside the store's directory."""

    META_FILE = "store.meta"

    def __init__(self, name: str, store_dir: Path):
        super().__init__(name)
        self.store_dir = store_dir

    def _entry_path(self, url: str) -> Path:
        return self.store_dir / f"{_hash(cache_key(url))}.json"

    async def match(self, url: str) -> Response | None:
        path = self._entry_path(url)
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                data = json.loads(await f.read())
            return Response(
                status=data["status"],
                body=base64.b64decode(data["body"]),
                headers=data.get("headers", {}),
                url=data.get("url", url),
                type=ResponseType(data.get("type", "basic")),
            )
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, KeyError, ValueError, OSError) as e:
            log.debug(f"Cache entry for '{url}' in '{self.name}' is unreadable: {e}")
            return None

    async def put(self, url: str, response: Response) -> None:
        payload = json.dumps(
            {
                "key": cache_key(url),
                "url": response.url or url,
                "status": response.status,
                "headers": response.headers,
                "type": response.type.value,
                "timestamp": time.time(),
                "body": base64.b64encode(response.body).decode("ascii"),
            }
        )
        path = self._entry_path(url)
        # Unique temp name so concurrent writers of the same key never interleave
        tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await asyncio.to_thread(os.replace, tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    async def delete(self, url: str) -> bool:
        try:
            await asyncio.to_thread(os.remove, self._entry_path(url))
            return True
        except FileNotFoundError:
            return False

    def _keys_sync(self) -> list[str]:
        keys = []
        for entry in self.store_dir.glob("*.json"):
            try:
                with open(entry, encoding="utf-8") as f:
                    keys.append(json.load(f)["key"])
            except (json.JSONDecodeError, KeyError, OSError):
                continue
        return sorted(keys)

    async def keys(self) -> list[str]:
        return await asyncio.to_thread(self._keys_sync)


class FileCacheStorage(CacheStorage):
    """Keeps one subdirectory per named store under `root_dir`."""

    def __init__(self, root_dir: Path):
        self.root_dir = root_dir
        self.root_dir.mkdir(parents=True, exist_ok=True)
        self._create_lock = asyncio.Lock()

    def _store_dir(self, name: str) -> Path:
        return self.root_dir / _hash(name)

    def _create_sync(self, name: str) -> None:
        store_dir = self._store_dir(name)
        store_dir.mkdir(parents=True, exist_ok=True)
        meta_path = store_dir / FileCacheStore.META_FILE
        if not meta_path.is_file():
            with open(meta_path, "w", encoding="utf-8") as f:
                json.dump({"name": name, "created": time.time()}, f)

    async def open(self, name: str) -> CacheStore:
        async with self._create_lock:
            await asyncio.to_thread(self._create_sync, name)
        return FileCacheStore(name, self._store_dir(name))

    async def has(self, name: str) -> bool:
        meta_path = self._store_dir(name) / FileCacheStore.META_FILE
        return await asyncio.to_thread(meta_path.is_file)

    def _keys_sync(self) -> list[str]:
        stores = []
        for meta_path in self.root_dir.glob(f"*/{FileCacheStore.META_FILE}"):
            try:
                with open(meta_path, encoding="utf-8") as f:
                    meta = json.load(f)
                stores.append((meta.get("created", 0.0), meta["name"]))
            except (json.JSONDecodeError, KeyError, OSError) as e:
                log.debug(f"Skipping unreadable cache store '{meta_path.parent}': {e}")
        return [name for _, name in sorted(stores)]

    async def keys(self) -> list[str]:
        return await asyncio.to_thread(self._keys_sync)

    async def delete(self, name: str) -> bool:
        store_dir = self._store_dir(name)
        if not await asyncio.to_thread(store_dir.is_dir):
            return False
        try:
            await asyncio.to_thread(shutil.rmtree, store_dir)
            return True
        except OSError as e:
            log.warning(f"Failed to delete cache store '{name}': {e}")
            return False
