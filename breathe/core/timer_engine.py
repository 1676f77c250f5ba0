"""
The breathing session engine: drift-resistant elapsed-time accounting across
pause/resume cycles, periodic sampling on the asyncio loop, and phase classification.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import replace

from breathe.core.phases import derive_phase
from breathe.models.config import (
    DEFAULT_PHASE_DURATION,
    PHASE_STORAGE_KEY,
    PhaseConfig,
    parse_phase_duration,
)
from breathe.models.timer import PhaseSample, TimerState
from breathe.storage.local_storage import LocalStorage

log = logging.getLogger(__name__)

SampleCallback = Callable[[PhaseSample], None]
RestartCallback = Callable[[int], None]


class SamplingHandle:
    """
    A cancellable token for one run of the periodic sampling task.

    Every sampling callback checks `active` before touching engine state, so a
    callback that was already scheduled when `cancel()` ran is a no-op.
    """

    def __init__(self) -> None:
        self._active = True
        self._task: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False
        if self._task is not None and not self._task.done():
            self._task.cancel()


class TimerEngine:
    """
    Tracks session time and derives the current breathing phase.

    Elapsed time is always computed from the clock delta since `running_since`
    added to the frozen baseline, never by counting ticks, so delayed or dropped
    ticks do not cause drift.
    """

    def __init__(
        self,
        config: PhaseConfig | None = None,
        store: LocalStorage | None = None,
        clock: Callable[[], float] = time.monotonic,
        sample_interval_ms: int = 100,
    ):
        """
        Args:
            config: Initial phase configuration (defaults to 4.0 seconds).
            store: Optional persistence store that receives every duration change.
            clock: Monotonic clock returning seconds.
            sample_interval_ms: Period of the sampling task.
        """
        self._config = config or PhaseConfig()
        self._store = store
        self._clock = clock
        self._interval = sample_interval_ms / 1000
        self._state = TimerState()
        self._handle: SamplingHandle | None = None
        self._subscribers: list[SampleCallback] = []
        self._restart_listeners: list[RestartCallback] = []

        # Last published values, read by the display layer
        self.display_ms = 0.0
        self.is_hold = False
        self.restart_token = 0

    @classmethod
    def from_store(
        cls,
        store: LocalStorage,
        default_duration: float = DEFAULT_PHASE_DURATION,
        **kwargs,
    ) -> "TimerEngine":
        """Creates an engine whose phase duration is restored from persistence."""
        raw = store.get(PHASE_STORAGE_KEY)
        duration = parse_phase_duration(raw)
        if duration is None:
            if raw is not None:
                log.debug(f"Ignoring invalid stored phase duration: {raw!r}")
            duration = default_duration
        return cls(PhaseConfig(phase_duration_seconds=duration), store=store, **kwargs)

    @property
    def phase_duration(self) -> float:
        return self._config.phase_duration_seconds

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def elapsed_ms(self) -> float:
        """The accumulated elapsed time at this instant."""
        return self._elapsed_at(self._clock())

    @property
    def state(self) -> TimerState:
        return replace(self._state)

    def subscribe(self, callback: SampleCallback) -> None:
        """Registers a callback that receives every republished sample."""
        self._subscribers.append(callback)

    def on_restart(self, callback: RestartCallback) -> None:
        """Registers a callback that receives the new restart token on reset."""
        self._restart_listeners.append(callback)

    def _elapsed_at(self, now: float) -> float:
        state = self._state
        if state.running_since is None:
            return state.elapsed_ms
        return state.elapsed_ms + max(0.0, (now - state.running_since) * 1000)

    def sample(self, now: float | None = None) -> PhaseSample:
        """Returns the elapsed time and phase at `now` without mutating state."""
        if now is None:
            now = self._clock()
        return derive_phase(self._elapsed_at(now), self.phase_duration)

    def start(self) -> SamplingHandle:
        """
        Starts or resumes the session and the periodic sampling task.

        Must be called from a running event loop. Returns the handle of the
        sampling task; calling it while already running returns the current handle.
        """
        if self._state.is_running and self._handle is not None:
            return self._handle

        loop = asyncio.get_running_loop()
        self._state.running_since = self._clock()
        self._state.is_running = True

        handle = SamplingHandle()
        handle._task = loop.create_task(self._sampling_loop(handle))
        self._handle = handle
        log.debug(f"Sampling started at {self._state.elapsed_ms:.0f} ms.")

        self._publish(self.sample())
        return handle

    def pause(self) -> None:
        """Freezes the elapsed time and stops sampling."""
        if not self._state.is_running:
            return
        now = self._clock()
        self._state.elapsed_ms = self._elapsed_at(now)
        self._state.running_since = None
        self._state.is_running = False
        self._cancel_sampling()
        self._publish(self.sample(now))

    def toggle(self) -> None:
        if self._state.is_running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        """Returns to a zeroed, stopped session and signals a restart."""
        self._cancel_sampling()
        self._state = TimerState()
        self.restart_token += 1
        for listener in self._restart_listeners:
            try:
                listener(self.restart_token)
            except Exception as e:
                log.warning(f"Restart listener failed: {e}")
        self._publish(self._neutral_sample(0.0))

    def set_phase_duration(self, value: float) -> float:
        """
        Changes the phase duration and persists it.

        The value is clamped to [1.0, 10.0] at 0.1 granularity. The elapsed time
        is left untouched. A running session is reclassified against the new
        duration; a paused one publishes a neutral, non-hold sample.

        Returns:
            The duration actually applied.
        """
        self._config.phase_duration_seconds = value
        if self._store is not None:
            self._store.set(PHASE_STORAGE_KEY, self._config.serialize())

        if self._state.is_running:
            self._publish(self.sample())
        else:
            self._publish(self._neutral_sample(self._state.elapsed_ms))
        return self.phase_duration

    def _neutral_sample(self, elapsed_ms: float) -> PhaseSample:
        return PhaseSample(
            elapsed_ms=elapsed_ms,
            phase_index=0,
            is_hold=False,
            phase_remaining_ms=self._config.phase_ms,
        )

    def tick(self, handle: SamplingHandle) -> None:
        """One sampling callback; a no-op unless `handle` is the live handle."""
        if not handle.active or handle is not self._handle:
            return
        self._publish(self.sample())

    async def _sampling_loop(self, handle: SamplingHandle) -> None:
        try:
            while handle.active:
                await asyncio.sleep(self._interval)
                self.tick(handle)
        except asyncio.CancelledError:
            log.debug("Sampling task cancelled.")

    def _cancel_sampling(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            log.debug("Sampling stopped.")

    def close(self) -> None:
        """Pauses the session and stops the sampling task; used on shutdown."""
        self.pause()
        self._cancel_sampling()

    def _publish(self, sample: PhaseSample) -> None:
        self.display_ms = sample.elapsed_ms
        self.is_hold = sample.is_hold
        for callback in self._subscribers:
            try:
                callback(sample)
            except Exception as e:
                log.warning(f"Sample subscriber failed: {e}")
