"""
Minimal HTTP value objects passed between the cache manager, the cache storage
and the network fetcher.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from urllib.parse import urljoin, urlsplit, urlunsplit


class ResponseType(Enum):
    """Mirrors the response types a browser assigns to fetched responses."""

    BASIC = "basic"  # Same-origin
    CORS = "cors"  # Cross-origin, readable
    OPAQUE = "opaque"  # Cross-origin, unreadable
    ERROR = "error"


def origin_of(url: str) -> str:
    """Returns the scheme://host[:port] part of an absolute URL."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}".lower()


def cache_key(url: str) -> str:
    """Normalizes a URL for cache lookups; fragments never take part in matching."""
    parts = urlsplit(url)
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, "")
    )


@dataclass(frozen=True)
class Request:
    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_path(cls, origin: str, path: str, method: str = "GET") -> "Request":
        """Builds a request for a path (or absolute URL) relative to the app origin."""
        return cls(url=urljoin(origin + "/", path), method=method.upper())

    @property
    def origin(self) -> str:
        return origin_of(self.url)

    @property
    def key(self) -> str:
        return cache_key(self.url)


@dataclass(frozen=True)
class Response:
    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    type: ResponseType = ResponseType.BASIC

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def clone(self) -> "Response":
        return replace(self, headers=dict(self.headers))

