"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from breathe import __version__
from breathe.core.timer_engine import TimerEngine
from breathe.models.config import PHASE_STORAGE_KEY, AppConfig
from breathe.models.stats import SessionStats
from breathe.offline.manager import CacheManager
from breathe.offline.network import NetworkFetcher
from breathe.storage.cache_storage import FileCacheStorage
from breathe.storage.config_manager import ConfigManager
from breathe.storage.local_storage import LocalStorage

from .formatters import (
    print_cache_entries,
    print_config,
    print_fetch_result,
    print_fetch_stats,
    print_session_summary,
)
from .session_display import SessionDisplay

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("breathe")

app = typer.Typer(
    name="breathe",
    help="Guided box breathing: inhale, hold, exhale, hold, each for the same time.",
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)
cache_app = typer.Typer(help="Manage the offline app shell cache.")
app.add_typer(cache_app, name="cache")


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "breathe"


CONFIG_DIR = get_config_dir()


def _config_file() -> Path:
    return CONFIG_DIR / "config.ini"


def _storage() -> LocalStorage:
    return LocalStorage(CONFIG_DIR / "storage.json")


def _load_config() -> AppConfig:
    return ConfigManager(_config_file()).load_config()


def _build_cache_manager(config: AppConfig, network: NetworkFetcher) -> CacheManager:
    return CacheManager(
        FileCacheStorage(CONFIG_DIR / "cache"),
        network,
        version=config.cache_version,
        origin=config.origin,
        precache_urls=config.precache_urls,
    )


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """Box breathing timer"""
    if version:
        console.print(f"[bold]breathe[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("breathe").setLevel(log_level)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def run(
    duration: float | None = typer.Option(
        None,
        "-d",
        "--duration",
        help="Seconds per phase (1.0-10.0). Remembered for later sessions.",
    ),
    minutes: float | None = typer.Option(
        None,
        "-m",
        "--minutes",
        help="Stop automatically after this many minutes (default: until Ctrl+C).",
    ),
):
    """Start a guided box-breathing session."""
    config = _load_config()
    engine = TimerEngine.from_store(
        _storage(),
        default_duration=config.default_phase_duration,
        sample_interval_ms=config.sample_interval_ms,
    )
    if duration is not None:
        engine.set_phase_duration(duration)

    stats = SessionStats(phase_duration_seconds=engine.phase_duration)
    engine.subscribe(lambda sample: stats.observe(sample.elapsed_ms, sample.is_hold))

    async def _run_async():
        with SessionDisplay(console, engine) as display:
            engine.subscribe(display.update)
            engine.start()
            try:
                if minutes:
                    await asyncio.sleep(minutes * 60)
                else:
                    await asyncio.Event().wait()
            finally:
                engine.close()

    # Ctrl+C is the normal way to end an open-ended session
    try:
        asyncio.run(_run_async())
    except KeyboardInterrupt:
        console.print("[yellow]⚠️  Session interrupted.[/yellow]")

    print_session_summary(stats)


@app.command(name="duration")
def duration_command(
    value: float | None = typer.Argument(
        None, help="New phase duration in seconds (clamped to 1.0-10.0)."
    ),
    reset: bool = typer.Option(
        False, "--reset", help="Forget the remembered duration and use the default."
    ),
):
    """Show, set or reset the remembered phase duration."""
    config = _load_config()
    storage = _storage()
    if reset:
        if value is not None:
            raise typer.BadParameter("Pass either a duration or --reset, not both.")
        storage.remove(PHASE_STORAGE_KEY)
        console.print(
            f"[green]✓ Phase duration reset to "
            f"{config.default_phase_duration:.1f}s.[/green]"
        )
        return

    engine = TimerEngine.from_store(
        storage, default_duration=config.default_phase_duration
    )
    if value is None:
        console.print(f"Phase duration: [cyan]{engine.phase_duration:.1f}s[/cyan]")
        return

    applied = engine.set_phase_duration(value)
    if applied != value:
        console.print(
            f"[yellow]⚠️  {value:g}s adjusted to {applied:.1f}s "
            "(range 1.0-10.0, step 0.1).[/yellow]"
        )
    console.print(f"[green]✓ Phase duration set to {applied:.1f}s.[/green]")


@app.command(name="config")
def config_command():
    """Display the effective configuration."""
    config = _load_config()
    engine = TimerEngine.from_store(
        _storage(), default_duration=config.default_phase_duration
    )
    print_config(_config_file(), config, engine.phase_duration)


@cache_app.command(name="install")
def cache_install():
    """Precache the app shell and remove stale cache versions."""
    config = _load_config()

    async def _install_async():
        async with NetworkFetcher(config.origin, config.network_timeout) as network:
            manager = _build_cache_manager(config, network)
            console.print(f"[cyan]Precaching app shell from {config.origin}...[/cyan]")
            await manager.install()
            deleted = await manager.activate()
        console.print(
            f"[green]✓ Cache '{config.cache_version}' is active "
            f"({len(deleted)} stale version(s) removed).[/green]"
        )

    asyncio.run(_install_async())


@cache_app.command(name="fetch")
def cache_fetch(
    urls: list[str] = typer.Argument(  # noqa: B008
        ..., help="Paths or URLs to request through the cache."
    ),
):
    """Request resources cache-first, falling back to the network."""
    config = _load_config()

    async def _fetch_async():
        async with NetworkFetcher(config.origin, config.network_timeout) as network:
            manager = _build_cache_manager(config, network)
            await manager.ensure_active()
            for url in urls:
                print_fetch_result(await manager.fetch(url))
            await manager.drain()
            print_fetch_stats(manager.stats)

    asyncio.run(_fetch_async())


@cache_app.command(name="list")
def cache_list():
    """List cache stores and their entries."""
    config = _load_config()

    async def _list_async():
        async with NetworkFetcher(config.origin, config.network_timeout) as network:
            manager = _build_cache_manager(config, network)
            print_cache_entries(await manager.entries(), config.cache_version)

    asyncio.run(_list_async())


@cache_app.command(name="clear")
def cache_clear(
    force: bool = typer.Option(
        False, "--force", "-f", help="Bypass the confirmation prompt."
    ),
):
    """Delete every cache store."""
    if not force and not typer.confirm("Delete all cached app shell versions?"):
        console.print("[yellow]Operation cancelled.[/yellow]")
        raise typer.Abort()

    config = _load_config()

    async def _clear_async():
        async with NetworkFetcher(config.origin, config.network_timeout) as network:
            manager = _build_cache_manager(config, network)
            removed = await manager.clear()
        console.print(f"[green]✓ Removed {removed} cache store(s).[/green]")

    asyncio.run(_clear_async())
