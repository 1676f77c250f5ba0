import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as AppServer

from breathe.exceptions import NetworkError
from breathe.models.http import Request, ResponseType
from breathe.models.stats import FetchSource
from breathe.offline.manager import CacheManager
from breathe.offline.network import NetworkFetcher
from breathe.storage.cache_storage import FileCacheStorage


def make_app() -> web.Application:
    async def index(request):
        return web.Response(text="<html>breathe</html>", content_type="text/html")

    async def manifest(request):
        return web.json_response({"name": "Breathe"})

    async def icon(request):
        return web.Response(body=b"<svg/>", content_type="image/svg+xml")

    app = web.Application()
    app.router.add_get("/", index)
    app.router.add_get("/manifest.json", manifest)
    app.router.add_get("/icon-192x192.svg", icon)
    app.router.add_get("/icon-512x512.svg", icon)
    return app


@pytest.fixture()
async def server():
    async with AppServer(make_app()) as test_server:
        yield test_server


def origin_of_server(server) -> str:
    return str(server.make_url("/")).rstrip("/")


async def test_fetch_same_origin_is_basic(server):
    origin = origin_of_server(server)
    async with NetworkFetcher(origin) as fetcher:
        response = await fetcher(Request.for_path(origin, "/manifest.json"))

    assert response.status == 200
    assert response.ok
    assert response.type is ResponseType.BASIC
    assert b"Breathe" in response.body


async def test_http_errors_are_responses(server):
    origin = origin_of_server(server)
    async with NetworkFetcher(origin) as fetcher:
        response = await fetcher(Request.for_path(origin, "/missing"))

    assert response.status == 404
    assert not response.ok


async def test_other_origin_is_not_basic(server):
    origin = origin_of_server(server)
    async with NetworkFetcher("http://breathe.invalid") as fetcher:
        response = await fetcher(Request.for_path(origin, "/"))

    assert response.type is ResponseType.CORS


async def test_unreachable_host_raises_network_error():
    async with NetworkFetcher("http://127.0.0.1:1", timeout=5) as fetcher:
        with pytest.raises(NetworkError):
            await fetcher(Request("http://127.0.0.1:1/"))


async def test_install_and_serve_offline_end_to_end(server, tmp_path):
    origin = origin_of_server(server)
    storage = FileCacheStorage(tmp_path / "cache")
    async with NetworkFetcher(origin) as fetcher:
        manager = CacheManager(storage, fetcher, version="breathe-cache-v1", origin=origin)
        await manager.ensure_active()

    async with NetworkFetcher("http://127.0.0.1:1", timeout=5) as offline:
        restarted = CacheManager(
            storage, offline, version="breathe-cache-v1", origin=origin
        )
        assert await restarted.restore()
        result = await restarted.fetch("/")

    assert result.source is FetchSource.CACHE
    assert result.response.status == 200
    assert result.response.body == b"<html>breathe</html>"
