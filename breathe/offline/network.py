"""
Async network access for the cache manager, built on a pooled aiohttp session.
"""

import asyncio
import logging

import aiohttp

from breathe.exceptions import NetworkError
from breathe.models.http import Request, Response, ResponseType, origin_of

log = logging.getLogger(__name__)


class NetworkFetcher:
    """
    Performs real HTTP requests and converts them into `Response` values.

    HTTP error statuses are returned as responses; only transport failures and
    timeouts raise `NetworkError`.
    """

    def __init__(self, origin: str, timeout: float = 30.0, max_connections: int = 8):
        """
        Args:
            origin: The app origin; responses from it are typed 'basic'.
            timeout: Total seconds allowed per request.
            max_connections: Size of the connection pool.
        """
        self.origin = origin_of(origin)
        self.timeout = timeout
        self.max_connections = max_connections
        self._session: aiohttp.ClientSession | None = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_connections,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "NetworkFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch(self, request: Request) -> Response:
        await self._initialize_session()
        try:
            async with self._session.request(
                request.method, request.url, headers=request.headers
            ) as r:
                body = await r.read()
                final_url = str(r.url)
                response_type = (
                    ResponseType.BASIC
                    if origin_of(final_url) == self.origin
                    else ResponseType.CORS
                )
                return Response(
                    status=r.status,
                    body=body,
                    headers={k: v for k, v in r.headers.items()},
                    url=final_url,
                    type=response_type,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.debug(f"Network request to {request.url} failed: {e!r}")
            raise NetworkError(f"Request to '{request.url}' failed: {e}") from e

    async def __call__(self, request: Request) -> Response:
        return await self.fetch(request)
