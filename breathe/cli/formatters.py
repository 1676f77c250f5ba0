"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from breathe.models.config import AppConfig
from breathe.models.stats import FetchStats, SessionStats
from breathe.offline.strategy import FetchResult
from breathe.utils.formatting import (
    format_duration,
    format_elapsed,
    format_phase_duration,
    format_size,
)


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your config.ini.",
            "• Run `breathe config` to see the effective settings.",
        ],
        "PrecacheError": [
            "• Make sure the app is being served at the configured origin.",
            "• Every precache path must return status 200.",
        ],
        "ShellUnavailableError": [
            "• You appear to be offline and the app shell was never cached.",
            "• Run `breathe cache install` while online.",
        ],
        "NetworkError": [
            "• Check your internet connection.",
            "• Increase `network_timeout` in config.ini for slow connections.",
        ],
        "LifecycleError": [
            "• Cache steps ran out of order. Run `breathe cache install` again.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config: AppConfig, phase_duration: float):
    """Displays the effective configuration."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Phase duration:", format_phase_duration(phase_duration))
    table.add_row("Sample interval:", f"{config.sample_interval_ms} ms")
    table.add_row("Cache version:", config.cache_version)
    table.add_row("Origin:", config.origin)
    table.add_row("Precache:", ", ".join(config.precache_urls))
    table.add_row("Network timeout:", f"{config.network_timeout:g}s")

    console.print(
        Panel(
            table,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_fetch_result(result: FetchResult):
    """Displays where a fetched response came from."""
    console = Console()
    response = result.response
    color = "green" if response.ok else "yellow"
    console.print(
        f"[{color}]{response.status}[/{color}] {response.url} "
        f"[dim]({result.source.value}, {format_size(len(response.body))})[/dim]"
    )


def print_cache_entries(entries: dict[str, list[str]], current_version: str):
    """Displays every cache store and the URLs it holds."""
    console = Console()
    if not entries:
        console.print("[dim]No cache stores yet.[/dim]")
        return

    table = Table(title="Cache Stores", box=box.ROUNDED)
    table.add_column("Store", style="cyan")
    table.add_column("Entries", justify="right", style="green")
    table.add_column("URLs", style="dim")
    for name, urls in entries.items():
        label = f"{name} [green](current)[/green]" if name == current_version else name
        table.add_row(label, str(len(urls)), "\n".join(urls))
    console.print(table)


def print_fetch_stats(stats: FetchStats):
    console = Console()
    console.print(
        f"[dim]cache hits: {stats.cache_hits} • network: {stats.network_responses} "
        f"• fallbacks: {stats.fallbacks} • passthrough: {stats.passthroughs}[/dim]"
    )


def print_session_summary(stats: SessionStats):
    """Prints a summary panel after a breathing session."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column(justify="right")

    table.add_row("Session time:", format_elapsed(stats.elapsed_ms))
    table.add_row("Phase duration:", format_phase_duration(stats.phase_duration_seconds))
    table.add_row("Full cycles:", str(stats.completed_cycles))
    table.add_row("Holds:", str(stats.hold_transitions))

    console.print(
        Panel(
            table,
            title="[bold green]✓ Session Complete[/bold green]",
            subtitle=f"[dim]{format_duration(stats.elapsed_ms / 1000)}[/dim]",
            border_style="green",
            expand=False,
        )
    )
