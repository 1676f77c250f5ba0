"""
Pure phase derivation: maps an elapsed time and a phase duration onto the
box-breathing cycle.
"""

import math

from breathe.models.timer import PhaseSample

PHASES_PER_CYCLE = 4
HOLD_PHASES = (1, 3)


def derive_phase(elapsed_ms: float, phase_duration_seconds: float) -> PhaseSample:
    """
    Classifies an instant of the session into one of the four phases.

    Phases are 0 = inhale, 1 = hold, 2 = exhale, 3 = hold. A non-positive
    duration never reports a hold.
    """
    phase_ms = phase_duration_seconds * 1000
    cycle_ms = phase_ms * PHASES_PER_CYCLE
    if cycle_ms <= 0 or not math.isfinite(cycle_ms):
        return PhaseSample(elapsed_ms=elapsed_ms, phase_index=0, is_hold=False)

    position = math.fmod(max(0.0, elapsed_ms), cycle_ms)
    # Guard against float rounding pushing the index past the last phase
    phase_index = min(PHASES_PER_CYCLE - 1, int(position // phase_ms))
    remaining = phase_ms - (position - phase_index * phase_ms)
    return PhaseSample(
        elapsed_ms=elapsed_ms,
        phase_index=phase_index,
        is_hold=phase_index in HOLD_PHASES,
        phase_remaining_ms=remaining,
    )


def is_hold_phase(elapsed_ms: float, phase_duration_seconds: float) -> bool:
    return derive_phase(elapsed_ms, phase_duration_seconds).is_hold
