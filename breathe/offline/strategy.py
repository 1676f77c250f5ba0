"""
The cache-first response policy, written as a pure decision function over injected
cache lookup, network and cache-write collaborators.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from breathe.exceptions import NetworkError, ShellUnavailableError
from breathe.models.http import Request, Response, ResponseType, origin_of
from breathe.models.stats import FetchSource

log = logging.getLogger(__name__)

CacheLookup = Callable[[Request], Awaitable[Response | None]]
NetworkCall = Callable[[Request], Awaitable[Response]]
CacheWrite = Callable[[Request, Response], None]


@dataclass(frozen=True)
class FetchResult:
    response: Response
    source: FetchSource


def should_intercept(request: Request, origin: str) -> bool:
    """Only same-origin GET requests are answered from the cache."""
    return request.method.upper() == "GET" and request.origin == origin_of(origin)


def is_cacheable(response: Response) -> bool:
    """A 200 same-origin ('basic') response; opaque or cross-origin ones are not kept."""
    return response.status == 200 and response.type is ResponseType.BASIC


async def respond(
    request: Request,
    *,
    origin: str,
    lookup: CacheLookup,
    network: NetworkCall,
    store: CacheWrite,
    fallback_path: str = "/",
) -> FetchResult:
    """
    Answers one request.

    1. Requests that are not same-origin GETs go to the network untouched.
    2. A cached response is returned without contacting the network.
    3. On a miss the network response is returned; a cacheable one is handed to
       `store` as a clone, which must not block delivery.
    4. If the network fails, the cached root document is served instead.

    Raises:
        ShellUnavailableError: The network failed and the root document is not cached.
    """
    if not should_intercept(request, origin):
        return FetchResult(await network(request), FetchSource.PASSTHROUGH)

    cached = await lookup(request)
    if cached is not None:
        log.debug(f"Cache hit: {request.url}")
        return FetchResult(cached, FetchSource.CACHE)

    log.debug(f"Cache miss: {request.url}")
    try:
        response = await network(request)
    except NetworkError as e:
        shell = await lookup(Request.for_path(origin, fallback_path))
        if shell is None:
            raise ShellUnavailableError(
                f"Network request for '{request.url}' failed and the app shell "
                "is not cached."
            ) from e
        log.debug(f"Network failed for {request.url}, serving cached app shell.")
        return FetchResult(shell, FetchSource.FALLBACK)

    if is_cacheable(response):
        store(request, response.clone())
    return FetchResult(response, FetchSource.NETWORK)
