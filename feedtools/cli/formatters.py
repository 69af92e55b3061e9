"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from feedtools.models.results import CandidateMatch, PipelineResult
from feedtools.utils.formatting import format_duration, truncate


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `feedtools init --force` to write a fresh default config.",
        ],
        "InstallationNotFoundError": [
            "• Make sure Steam is installed.",
            "• Set `install_root` in the configuration file to your Steam folder.",
        ],
        "NetworkError": [
            "• Check your internet connection.",
            "• The Steam store or the archive server may be temporarily down.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• Please try again in a few minutes.",
        ],
        "TimeoutError": [
            "• A request timed out, which may indicate network throttling.",
            "• Increase the timeouts in your configuration file.",
        ],
        "PermissionError": [
            "• Steam's folders usually need Administrator rights to modify.",
            "• Re-run the command from an elevated terminal.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_candidates_table(
    candidates: Sequence[CandidateMatch], query: str, console: Console | None = None
):
    """Displays the matches a user can choose from."""
    console = console or Console()
    table = Table(title=f"Matches for '{escape(query)}'")
    table.add_column("#", style="dim", justify="right")
    table.add_column("App ID", style="cyan", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Store Page", style="dim")
    for i, candidate in enumerate(candidates, 1):
        table.add_row(
            str(i),
            str(candidate.app_id),
            escape(truncate(candidate.name, 60)),
            escape(candidate.url or ""),
        )
    console.print(table)


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in sorted(config_data.items()):
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            escape(content.strip()),
            title=f"Configuration ([dim]{escape(str(config_path))}[/dim])",
            border_style="cyan",
        )
    )


def print_summary_panel(
    app_id: int,
    result: PipelineResult,
    duration_s: float,
    progress_stats: dict | None = None,
):
    """Displays the final summary of an installation run."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=16)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("App ID:", f"[cyan]{app_id}[/cyan]")
    stats_table.add_row("Result:", escape(result.message))
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")
    if progress_stats:
        stats_table.add_row(
            "Log Lines:", f"[dim]{progress_stats.get('log_lines', 0)}[/dim]"
        )

    if result.success:
        title = "✓ [bold]Installation Complete[/bold]"
        border_color = "green"
    else:
        title = "✗ [bold]Installation Failed[/bold]"
        border_color = "red"

    console.print()
    console.print(Panel(stats_table, title=title, border_style=border_color, expand=False))
