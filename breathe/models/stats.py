"""
Dataclasses for tracking breathing session and offline fetch statistics.
"""

from dataclasses import dataclass, field
from enum import Enum


class FetchSource(Enum):
    """Where the response to an intercepted request came from."""

    CACHE = "cache"
    NETWORK = "network"
    FALLBACK = "fallback"  # Cached root document served while offline
    PASSTHROUGH = "passthrough"  # Not intercepted


@dataclass
class FetchStats:
    """Counts how intercepted requests were answered."""

    cache_hits: int = 0
    network_responses: int = 0
    fallbacks: int = 0
    passthroughs: int = 0
    cache_writes: int = 0
    cache_write_failures: int = 0

    def record(self, source: FetchSource) -> None:
        if source is FetchSource.CACHE:
            self.cache_hits += 1
        elif source is FetchSource.NETWORK:
            self.network_responses += 1
        elif source is FetchSource.FALLBACK:
            self.fallbacks += 1
        else:
            self.passthroughs += 1

    @property
    def total(self) -> int:
        return (
            self.cache_hits + self.network_responses + self.fallbacks + self.passthroughs
        )


@dataclass
class SessionStats:
    """Summary of a breathing session as shown after `breathe run`."""

    phase_duration_seconds: float
    elapsed_ms: float = 0.0
    hold_transitions: int = 0
    _last_hold: bool = field(default=False, repr=False)

    @property
    def completed_cycles(self) -> int:
        cycle_ms = self.phase_duration_seconds * 4000
        return int(self.elapsed_ms // cycle_ms) if cycle_ms > 0 else 0

    def observe(self, elapsed_ms: float, is_hold: bool) -> None:
        self.elapsed_ms = elapsed_ms
        if is_hold and not self._last_hold:
            self.hold_transitions += 1
        self._last_hold = is_hold
