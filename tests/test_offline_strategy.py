import pytest

from breathe.exceptions import NetworkError, ShellUnavailableError
from breathe.models.http import Request, Response, ResponseType
from breathe.models.stats import FetchSource
from breathe.offline.strategy import is_cacheable, respond, should_intercept

from .conftest import ORIGIN


class Recorder:
    """Collects cache writes handed off by `respond`."""

    def __init__(self):
        self.writes: list[tuple[Request, Response]] = []

    def __call__(self, request, response):
        self.writes.append((request, response))


def cache_from(entries: dict[str, Response]):
    async def lookup(request: Request):
        return entries.get(request.key)

    return lookup


async def call(request, network, entries=None, recorder=None):
    return await respond(
        request,
        origin=ORIGIN,
        lookup=cache_from(entries or {}),
        network=network,
        store=recorder or Recorder(),
    )


def test_should_intercept():
    assert should_intercept(Request(f"{ORIGIN}/a"), ORIGIN)
    assert not should_intercept(Request(f"{ORIGIN}/a", method="POST"), ORIGIN)
    assert not should_intercept(Request("https://cdn.example/a.js"), ORIGIN)


def test_is_cacheable():
    assert is_cacheable(Response(status=200, type=ResponseType.BASIC))
    assert not is_cacheable(Response(status=201, type=ResponseType.BASIC))
    assert not is_cacheable(Response(status=200, type=ResponseType.OPAQUE))
    assert not is_cacheable(Response(status=200, type=ResponseType.CORS))


async def test_cache_hit_skips_network(network):
    request = Request.for_path(ORIGIN, "/manifest.json")
    cached = Response(status=200, body=b"cached", url=request.url)

    result = await call(request, network, {request.key: cached})

    assert result.source is FetchSource.CACHE
    assert result.response.body == b"cached"
    assert network.calls == []


async def test_miss_returns_network_response_and_stores_clone(network):
    recorder = Recorder()
    request = Request.for_path(ORIGIN, "/manifest.json")

    result = await call(request, network, recorder=recorder)

    assert result.source is FetchSource.NETWORK
    assert result.response.status == 200
    assert len(recorder.writes) == 1
    stored_request, stored = recorder.writes[0]
    assert stored_request is request
    assert stored == result.response
    assert stored is not result.response


async def test_non_200_is_not_stored(network):
    recorder = Recorder()
    result = await call(Request.for_path(ORIGIN, "/missing"), network, recorder=recorder)

    assert result.response.status == 404
    assert recorder.writes == []


async def test_post_passes_through_uncached(network):
    recorder = Recorder()
    request = Request.for_path(ORIGIN, "/", method="POST")
    cached = Response(status=200, body=b"cached")

    result = await call(request, network, {request.key: cached}, recorder)

    assert result.source is FetchSource.PASSTHROUGH
    assert result.response.body != b"cached"
    assert len(network.calls) == 1
    assert recorder.writes == []


async def test_cross_origin_passes_through(network):
    network.add("https://cdn.example/font.woff2", b"font", type=ResponseType.CORS)
    recorder = Recorder()

    result = await call(
        Request("https://cdn.example/font.woff2"), network, recorder=recorder
    )

    assert result.source is FetchSource.PASSTHROUGH
    assert recorder.writes == []


async def test_cross_origin_failure_propagates(network):
    network.offline = True
    root = Request.for_path(ORIGIN, "/")

    with pytest.raises(NetworkError):
        await call(
            Request("https://cdn.example/font.woff2"),
            network,
            {root.key: Response(status=200)},
        )


async def test_offline_falls_back_to_root_document(network):
    network.offline = True
    root = Request.for_path(ORIGIN, "/")
    shell = Response(status=200, body=b"<html>shell</html>", url=root.url)

    result = await call(Request.for_path(ORIGIN, "/settings"), network, {root.key: shell})

    assert result.source is FetchSource.FALLBACK
    assert result.response.body == b"<html>shell</html>"


async def test_offline_without_shell_raises(network):
    network.offline = True

    with pytest.raises(ShellUnavailableError) as exc_info:
        await call(Request.for_path(ORIGIN, "/settings"), network)

    assert isinstance(exc_info.value.__cause__, NetworkError)
