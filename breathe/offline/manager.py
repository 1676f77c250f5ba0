"""
The offline cache manager: precaches the app shell at install time, garbage-collects
stale cache versions at activation, and answers intercepted requests cache-first.
"""

import asyncio
import logging
from enum import Enum

from breathe.exceptions import LifecycleError, PrecacheError
from breathe.models.config import DEFAULT_PRECACHE_URLS
from breathe.models.http import Request, Response
from breathe.models.stats import FetchSource, FetchStats
from breathe.storage.cache_storage import CacheStorage, CacheStore

from .clients import ClientRegistry
from .strategy import FetchResult, NetworkCall, respond

log = logging.getLogger(__name__)


class LifecycleState(Enum):
    """States of the cache manager."""

    NEW = "new"
    INSTALLING = "installing"
    WAITING = "waiting"  # Installed, ready to activate
    ACTIVE = "active"
    REDUNDANT = "redundant"  # Install failed


class CacheManager:
    """
    Serves a versioned local cache in front of the network.

    Exactly one cache store, the one named after `version`, is current; every
    other store is removed when this manager activates.
    """

    def __init__(
        self,
        storage: CacheStorage,
        network: NetworkCall,
        version: str,
        origin: str,
        precache_urls: list[str] | None = None,
        clients: ClientRegistry | None = None,
        stats: FetchStats | None = None,
        fallback_path: str = "/",
    ):
        """
        Args:
            storage: Backend holding all named cache stores.
            network: Coroutine function performing a real request.
            version: Name of the current cache store; changing it invalidates the rest.
            origin: The app origin; only its GET requests are intercepted.
            precache_urls: App shell paths fetched at install time.
            clients: Open pages to claim on activation.
            stats: Counters updated for every handled fetch.
            fallback_path: Document served when the network is unreachable.
        """
        self._storage = storage
        self._network = network
        self.version = version
        self.origin = origin.rstrip("/")
        self.precache_urls = list(precache_urls or DEFAULT_PRECACHE_URLS)
        self.clients = clients or ClientRegistry()
        self.stats = stats or FetchStats()
        self.fallback_path = fallback_path
        self.skip_waiting = False

        self._state = LifecycleState.NEW
        self._lifecycle_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task] = set()

    @property
    def state(self) -> LifecycleState:
        return self._state

    async def install(self) -> None:
        """
        Creates the current store and fills it with the app shell.

        Raises:
            LifecycleError: If the manager was already installed.
            PrecacheError: If any shell resource could not be fetched; nothing is kept.
        """
        async with self._lifecycle_lock:
            if self._state is not LifecycleState.NEW:
                raise LifecycleError(f"Cannot install from state '{self._state.value}'.")
            self._state = LifecycleState.INSTALLING
            log.debug(f"Installing cache '{self.version}'...")

            had_store = await self._storage.has(self.version)
            try:
                store = await self._storage.open(self.version)
                await self._precache(store)
            except Exception:
                self._state = LifecycleState.REDUNDANT
                if not had_store:
                    await self._storage.delete(self.version)
                raise

            self.skip_waiting = True
            self._state = LifecycleState.WAITING
            log.info(
                f"[green]✓ Precached {len(self.precache_urls)} resources into "
                f"'{self.version}'.[/green]"
            )

    async def _precache(self, store: CacheStore) -> None:
        requests = [Request.for_path(self.origin, url) for url in self.precache_urls]
        results = await asyncio.gather(
            *(self._network(request) for request in requests), return_exceptions=True
        )

        entries: dict[str, Response] = {}
        for request, result in zip(requests, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                raise PrecacheError(
                    f"Failed to precache '{request.url}': {result}"
                ) from result
            if not result.ok:
                raise PrecacheError(
                    f"Failed to precache '{request.url}': status {result.status}"
                )
            entries[request.url] = result

        await store.put_all(entries)

    async def activate(self) -> list[str]:
        """
        Deletes every stale cache store and takes control of all open pages.

        Returns:
            The names of the deleted stores.

        Raises:
            LifecycleError: If the manager has not finished installing.
        """
        async with self._lifecycle_lock:
            if self._state is not LifecycleState.WAITING:
                raise LifecycleError(
                    f"Cannot activate from state '{self._state.value}'."
                )

            deleted = await self._delete_stale()
            self._state = LifecycleState.ACTIVE
            self.clients.claim(self.version)
            return deleted

    async def _delete_stale(self) -> list[str]:
        deleted = []
        for name in await self._storage.keys():
            if name != self.version and await self._storage.delete(name):
                deleted.append(name)
                log.debug(f"Deleted stale cache store '{name}'.")
        if deleted:
            log.info(f"Removed {len(deleted)} stale cache version(s).")
        return deleted

    async def restore(self) -> bool:
        """
        Resumes a manager whose version was installed earlier.

        An install that was never activated leaves older stores behind; they
        are removed here exactly as `activate()` would.

        Returns:
            True if the current store exists and the manager is now active.
        """
        async with self._lifecycle_lock:
            if self._state is LifecycleState.ACTIVE:
                return True
            if self._state is not LifecycleState.NEW:
                return False
            if not await self._storage.has(self.version):
                return False
            await self._delete_stale()
            self._state = LifecycleState.ACTIVE
            self.clients.claim(self.version)
            log.debug(f"Restored active cache '{self.version}'.")
            return True

    async def ensure_active(self) -> None:
        """Restores the current version, or installs and activates it."""
        if await self.restore():
            return
        await self.install()
        await self.activate()

    async def handle_fetch(self, request: Request) -> FetchResult:
        """Answers an intercepted request; before activation it goes straight out."""
        if self._state is not LifecycleState.ACTIVE:
            result = FetchResult(await self._network(request), FetchSource.PASSTHROUGH)
        else:
            result = await respond(
                request,
                origin=self.origin,
                lookup=self._lookup,
                network=self._network,
                store=self._schedule_write,
                fallback_path=self.fallback_path,
            )
        self.stats.record(result.source)
        return result

    async def fetch(self, url_or_path: str, method: str = "GET") -> FetchResult:
        return await self.handle_fetch(
            Request.for_path(self.origin, url_or_path, method=method)
        )

    async def _lookup(self, request: Request) -> Response | None:
        # Only the current version answers; a store that failed to delete never does
        if not await self._storage.has(self.version):
            return None
        store = await self._storage.open(self.version)
        return await store.match(request.url)

    def _schedule_write(self, request: Request, response: Response) -> None:
        task = asyncio.create_task(self._write(request, response))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write(self, request: Request, response: Response) -> None:
        try:
            store = await self._storage.open(self.version)
            await store.put(request.url, response)
            self.stats.cache_writes += 1
        except Exception as e:
            self.stats.cache_write_failures += 1
            log.warning(f"Cache write failed for '{request.url}': {e}")

    async def drain(self) -> None:
        """Waits for all pending background cache writes."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    async def entries(self) -> dict[str, list[str]]:
        """Lists the URLs held in every cache store."""
        result = {}
        for name in await self._storage.keys():
            store = await self._storage.open(name)
            result[name] = await store.keys()
        return result

    async def clear(self) -> int:
        """Deletes every cache store and returns how many were removed."""
        removed = 0
        for name in await self._storage.keys():
            if await self._storage.delete(name):
                removed += 1
        return removed
