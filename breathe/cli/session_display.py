"""
A Rich Live display for a breathing session: the current phase, a bar that fills
over the phase, the session time and a HOLD badge.
"""

from rich.align import Align
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.text import Text

from breathe.core.timer_engine import TimerEngine
from breathe.models.timer import Phase, PhaseSample
from breathe.utils.formatting import format_elapsed, format_phase_duration

PHASE_STYLES = {
    Phase.INHALE: "bold sky_blue1",
    Phase.HOLD_IN: "bold white",
    Phase.EXHALE: "bold blue",
    Phase.HOLD_OUT: "bold white",
}


def render_sample(
    sample: PhaseSample, phase_duration: float, is_running: bool
) -> Panel:
    """Builds the renderable for one sample."""
    phase = sample.phase
    phase_ms = phase_duration * 1000
    done = max(0.0, phase_ms - sample.phase_remaining_ms)

    title = Text(phase.label.upper(), style=PHASE_STYLES[phase], justify="center")
    if sample.is_hold:
        badge = Text("HOLD", style="bold reverse", justify="center")
    else:
        badge = Text("")
    bar = ProgressBar(total=phase_ms, completed=done, width=40)
    footer = Text(
        f"Session time: {format_elapsed(sample.elapsed_ms)}   "
        f"Phase length: {format_phase_duration(phase_duration)}",
        style="dim",
        justify="center",
    )

    return Panel(
        Group(title, Align.center(bar), badge, footer),
        title="[bold]Box Breathing[/bold]",
        subtitle="" if is_running else "[yellow]paused[/yellow]",
        border_style="cyan" if is_running else "yellow",
        width=56,
    )


class SessionDisplay:
    """Context manager that redraws the session panel on every published sample."""

    def __init__(self, console: Console, engine: TimerEngine):
        self.console = console
        self.engine = engine
        self._live: Live | None = None

    def __enter__(self) -> "SessionDisplay":
        self._live = Live(console=self.console, refresh_per_second=10, transient=True)
        self._live.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._live:
            self._live.__exit__(exc_type, exc_val, exc_tb)
            self._live = None
        return False

    def update(self, sample: PhaseSample) -> None:
        if self._live:
            self._live.update(
                render_sample(sample, self.engine.phase_duration, self.engine.is_running)
            )
