"""
A Rich-based progress sink: a live status spinner for the current stage, with
pipeline log lines printed above it.
"""

import asyncio
import logging
import time
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.status import Status

from feedtools.models.results import CandidateMatch, PipelineResult

log = logging.getLogger("feedtools")


class ProgressManager:
    """
    Implements the pipeline's progress sink for the terminal.

    Besides rendering, it remembers the disambiguation candidates, the last
    search error and the terminal result so the CLI can act on them once the
    pipeline call returns.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self.console = console
        self.quiet = quiet

        self.candidates: tuple[CandidateMatch, ...] = ()
        self.search_error_message: str | None = None
        self.result: PipelineResult | None = None
        self.current_status: str = ""

        self._status: Status | None = None
        self._start_time: float | None = None
        self._stats = {
            "log_lines": 0,
            "stages": 0,
        }

    def log(self, message: str) -> None:
        """Prints one pipeline log line above the spinner."""
        self._stats["log_lines"] += 1
        if self.quiet:
            log.debug(message)
            return
        style = None
        stripped = message.lstrip()
        if stripped.startswith("✓"):
            style = "green"
        elif stripped.startswith(("⚠", "✗")) or stripped.startswith("Error"):
            style = "yellow"
        self.console.print(escape(message), style=style, highlight=False)

    def status(self, label: str) -> None:
        self._stats["stages"] += 1
        self.current_status = label
        if self._status is not None:
            self._status.update(f"[bold cyan]{escape(label)}[/bold cyan]")

    def show_selection(self, candidates: Sequence[CandidateMatch]) -> None:
        self.candidates = tuple(candidates)

    def search_error(self, message: str) -> None:
        self.search_error_message = message
        self.console.print(f"[red]✗ {escape(message)}[/red]")

    def complete(self, result: PipelineResult) -> None:
        self.result = result

    @property
    def elapsed(self) -> float:
        if self._start_time is None:
            return 0.0
        return time.monotonic() - self._start_time

    def get_statistics(self) -> dict:
        return self._stats.copy()

    def pause(self) -> None:
        """Stops the spinner so the terminal can be used for a prompt."""
        if self._status is not None:
            self._status.stop()

    def resume(self) -> None:
        if self._status is not None:
            self._status.start()

    async def __aenter__(self):
        self._start_time = time.monotonic()
        if not self.quiet:
            self._status = self.console.status(
                "[bold cyan]Starting...[/bold cyan]", spinner="dots"
            )
            self._status.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._status is not None:
            await asyncio.sleep(0.1)
            self._status.stop()
            self._status = None
