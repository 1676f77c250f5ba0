"""
Data structures for the breathing timer: phases, timer state and derived samples.
"""

from dataclasses import dataclass
from enum import Enum


class Phase(Enum):
    """The four equal-length phases of a box-breathing cycle."""

    INHALE = 0
    HOLD_IN = 1
    EXHALE = 2
    HOLD_OUT = 3

    @property
    def is_hold(self) -> bool:
        return self in (Phase.HOLD_IN, Phase.HOLD_OUT)

    @property
    def label(self) -> str:
        if self.is_hold:
            return "Hold"
        return "Inhale" if self is Phase.INHALE else "Exhale"


@dataclass
class TimerState:
    """
    Mutable elapsed-time bookkeeping.

    While running, the elapsed time is `elapsed_ms` plus the clock delta since
    `running_since`. While paused, it is frozen at `elapsed_ms`.
    """

    elapsed_ms: float = 0.0
    running_since: float | None = None
    is_running: bool = False


@dataclass(frozen=True)
class PhaseSample:
    """A point-in-time classification of the session."""

    elapsed_ms: float
    phase_index: int
    is_hold: bool
    phase_remaining_ms: float = 0.0

    @property
    def phase(self) -> Phase:
        return Phase(self.phase_index)
