"""
Core timer logic.

`derive_phase` classifies an elapsed time into one of the four breathing phases,
and `TimerEngine` keeps drift-free session time across pause/resume cycles.
"""

from .phases import derive_phase, is_hold_phase
from .timer_engine import SamplingHandle, TimerEngine

__all__ = ["SamplingHandle", "TimerEngine", "derive_phase", "is_hold_phase"]
