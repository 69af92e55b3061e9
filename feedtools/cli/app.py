"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from feedtools import __version__
from feedtools.core.pipeline import Pipeline
from feedtools.exceptions import FeedToolsError, InstallationNotFoundError
from feedtools.models.config import PipelineConfig
from feedtools.models.results import (
    CandidateMatch,
    MultipleMatches,
    NoMatch,
    PipelineResult,
    SingleMatch,
)
from feedtools.storage.config_manager import ConfigManager
from feedtools.utils.structured_logger import create_run_logger

from .formatters import print_candidates_table, print_config, print_summary_panel
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="WARNING",
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
log = logging.getLogger("feedtools")

app = typer.Typer(
    name="feedtools",
    help=(
        "Finds a Steam game, installs its plugin and manifest files, and restarts"
        " Steam. Use 'feedtools <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "feedtools"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


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
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Steam plugin installer"""
    if version:
        console.print(f"[bold]feedtools[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose >= 2:
        log_level = "DEBUG"
    elif verbose == 1:
        log_level = "INFO"
    log.setLevel(log_level)

    if show_config:
        config = ConfigManager(CONFIG_FILE).load_config()
        print_config(CONFIG_FILE, config.model_dump(exclude={"config_path"}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config without asking."
    ),
):
    """Write a configuration file with the default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    ConfigManager(CONFIG_FILE).save_new_config()
    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print("Ready to install! Try: [cyan]feedtools install <NAME | ID | URL>[/cyan]")


def _load_config() -> PipelineConfig:
    return ConfigManager(CONFIG_FILE).load_config()


def _choose_candidate(
    candidates: tuple[CandidateMatch, ...], query: str, pick: Optional[int]
) -> CandidateMatch:
    print_candidates_table(candidates, query, console)
    if pick is None:
        pick = typer.prompt(
            f"Select a game [1-{len(candidates)}]", type=int, default=1
        )
    if not 1 <= pick <= len(candidates):
        console.print(
            f"[red]✗ Invalid selection {pick}; choose between 1 and "
            f"{len(candidates)}.[/red]"
        )
        raise typer.Exit(code=1)
    return candidates[pick - 1]


@app.command(name="install")
def install_command(
    query: str = typer.Argument(..., help="Game name, App ID, or store page URL."),
    pick: Optional[int] = typer.Option(
        None,
        "--pick",
        "-p",
        min=1,
        help="Choose this match (1-based) when the query is ambiguous.",
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Do not ask before Steam is restarted."
    ),
):
    """Install the files for a game and restart Steam."""
    config = _load_config()

    if not yes and not typer.confirm(
        "Steam will be closed and restarted during installation. Continue?",
        default=True,
    ):
        raise typer.Abort()

    async def _install_async() -> Optional[PipelineResult]:
        json_logger, run_logger = create_run_logger(
            CONFIG_DIR / "logs", enable_json=config.json_log
        )
        try:
            async with Pipeline(config, run_logger=run_logger) as pipeline:
                if not pipeline.helper_available():
                    log.warning(
                        f"[yellow]{config.helper_executable} was not found; the"
                        " helper restart will be skipped.[/yellow]"
                    )
                with console.status("[bold cyan]Searching for game...[/bold cyan]"):
                    target = await pipeline.resolve(query)

                if isinstance(target, NoMatch):
                    console.print(f"[red]✗ No game found for: {query}[/red]")
                    return None

                async with ProgressManager(console) as progress:
                    if isinstance(target, MultipleMatches):
                        progress.pause()
                        choice = _choose_candidate(target.candidates, query, pick)
                        progress.resume()
                        app_id = choice.app_id
                        result = await pipeline.confirm_selection(app_id, progress)
                    else:
                        app_id = target.app_id
                        result = await pipeline.start_pipeline(app_id, progress)

                print_summary_panel(
                    app_id, result, progress.elapsed, progress.get_statistics()
                )
                return result
        finally:
            json_logger.close()
            if json_logger.json_log_path:
                console.print(f"[dim]Run log: {json_logger.json_log_path}[/dim]")

    try:
        result = asyncio.run(_install_async())
    except KeyboardInterrupt:
        console.print(
            "\n[yellow]⚠ Interrupted. If Steam was already closed, start it again"
            " manually.[/yellow]"
        )
        raise typer.Exit(code=130) from None
    if result is None or not result.success:
        raise typer.Exit(code=1)


@app.command(name="search")
def search_command(
    query: str = typer.Argument(..., help="Game name, App ID, or store page URL."),
):
    """Resolve a query to an App ID without installing anything."""
    config = _load_config()

    async def _search_async():
        async with Pipeline(config) as pipeline:
            with console.status("[bold cyan]Searching for game...[/bold cyan]"):
                return await pipeline.resolve(query)

    target = asyncio.run(_search_async())
    if isinstance(target, SingleMatch):
        console.print(f"[green]✓[/] App ID: [cyan]{target.app_id}[/cyan]")
    elif isinstance(target, MultipleMatches):
        print_candidates_table(target.candidates, query, console)
    elif isinstance(target, NoMatch):
        console.print(f"[red]✗ No game found for: {query}[/red]")
        raise typer.Exit(code=1)


@app.command()
def diagnose():
    """Diagnose common configuration, installation and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False
    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print(
            "[yellow]⚠ Config file not found, using defaults.[/] Run"
            " [cyan]feedtools init[/cyan] to create one."
        )
    try:
        config = _load_config()
        console.print("[green]✓[/] Configuration is valid and can be loaded.")
    except FeedToolsError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    pipeline = Pipeline(config)
    try:
        targets = pipeline.locator.require_targets()
        console.print(f"[green]✓[/] Steam installation: [dim]{targets.root}[/dim]")
    except InstallationNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        issues_found = True

    helper = pipeline.locator.find_helper_executable()
    if helper is None:
        console.print(
            f"[yellow]⚠ {config.helper_executable} not found.[/] Set `helper_path`."
        )
    else:
        console.print(f"[green]✓[/] {config.helper_executable}: [dim]{helper}[/dim]")

    console.print("\n[dim]Testing connectivity to the Steam store...[/dim]")

    async def test_connection():
        import aiohttp

        try:
            timeout = aiohttp.ClientTimeout(total=10)
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.get(config.store_search_url) as resp,
            ):
                if resp.status == 200:
                    console.print("[green]✓[/] Successfully connected to the store.")
                    return True
                console.print(
                    f"[red]✗ Could not connect to the store (Status: {resp.status})."
                    "[/red]"
                )
                return False
        except Exception as e:
            console.print(f"[red]✗ Connection test failed: {e}[/red]")
            return False
        finally:
            await pipeline.aclose()

    if not asyncio.run(test_connection()):
        issues_found = True
    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
