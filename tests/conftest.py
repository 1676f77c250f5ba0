import pytest

from breathe.exceptions import NetworkError
from breathe.models.http import Request, Response, ResponseType, cache_key
from breathe.storage.cache_storage import MemoryCacheStorage
from breathe.storage.local_storage import LocalStorage

ORIGIN = "http://localhost:3000"


class FakeClock:
    """A monotonic clock that only moves when told to (seconds)."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class FakeNetwork:
    """Serves canned responses by URL and records every request."""

    def __init__(self, origin: str = ORIGIN):
        self.origin = origin
        self.routes: dict[str, Response] = {}
        self.calls: list[Request] = []
        self.offline = False

    def add(
        self,
        path: str,
        body: bytes = b"",
        status: int = 200,
        type: ResponseType = ResponseType.BASIC,
    ) -> None:
        request = Request.for_path(self.origin, path)
        self.routes[request.key] = Response(
            status=status, body=body, url=request.url, type=type
        )

    def add_shell(self) -> None:
        self.add("/", b"<html>breathe</html>")
        self.add("/manifest.json", b'{"name": "Breathe"}')
        self.add("/icon-192x192.svg", b"<svg/>")
        self.add("/icon-512x512.svg", b"<svg/>")

    async def __call__(self, request: Request) -> Response:
        self.calls.append(request)
        if self.offline:
            raise NetworkError(f"offline: {request.url}")
        response = self.routes.get(cache_key(request.url))
        if response is None:
            return Response(status=404, url=request.url)
        return response


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def network():
    fake = FakeNetwork()
    fake.add_shell()
    return fake


@pytest.fixture()
def memory_storage():
    return MemoryCacheStorage()


@pytest.fixture()
def local_storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")
