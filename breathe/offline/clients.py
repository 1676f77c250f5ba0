"""
Tracks the open pages a cache manager may control.
"""

import logging
import uuid
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass
class Client:
    id: str
    url: str
    controller: str | None = None


class ClientRegistry:
    """The set of open pages in scope, with the cache version controlling each."""

    def __init__(self) -> None:
        self._clients: dict[str, Client] = {}

    def open(self, url: str, client_id: str | None = None) -> Client:
        client = Client(id=client_id or uuid.uuid4().hex, url=url)
        self._clients[client.id] = client
        return client

    def close(self, client_id: str) -> None:
        self._clients.pop(client_id, None)

    def all(self) -> list[Client]:
        return list(self._clients.values())

    def uncontrolled(self) -> list[Client]:
        return [c for c in self._clients.values() if c.controller is None]

    def claim(self, version: str) -> int:
        """Puts every page not yet controlled by `version` under its control."""
        claimed = 0
        for client in self._clients.values():
            if client.controller != version:
                client.controller = version
                claimed += 1
        if claimed:
            log.debug(f"Claimed {claimed} open page(s) for '{version}'.")
        return claimed
