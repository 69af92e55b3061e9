"""
The progress sink protocol through which the pipeline reports to its caller.

Sinks are the user-facing channel: plain log lines, a short status label, a
disambiguation event and one terminal result per run. Diagnostics that only
matter to developers go to `logging` instead.
"""

import logging
from typing import Protocol, Sequence

from feedtools.models.results import CandidateMatch, PipelineResult

log = logging.getLogger("feedtools")


class ProgressSink(Protocol):
    def log(self, message: str) -> None:
        """Receives one human-readable progress line."""

    def status(self, label: str) -> None:
        """Receives a short status label for the current stage."""

    def show_selection(self, candidates: Sequence[CandidateMatch]) -> None:
        """Receives the candidate list when a query needs disambiguation."""

    def search_error(self, message: str) -> None:
        """Receives the reason a query could not be resolved."""

    def complete(self, result: PipelineResult) -> None:
        """Receives the terminal outcome of a run, exactly once."""


class LoggingSink:
    """A sink that forwards everything to the `feedtools` logger."""

    def __init__(self, logger: logging.Logger = log):
        self._logger = logger

    def log(self, message: str) -> None:
        self._logger.info(message)

    def status(self, label: str) -> None:
        self._logger.debug(f"Status: {label}")

    def show_selection(self, candidates: Sequence[CandidateMatch]) -> None:
        self._logger.info(f"{len(candidates)} matches found, a selection is required:")
        for candidate in candidates:
            self._logger.info(f"  {candidate.app_id}: {candidate.name}")

    def search_error(self, message: str) -> None:
        self._logger.warning(message)

    def complete(self, result: PipelineResult) -> None:
        if result.success:
            self._logger.info(result.message)
        else:
            self._logger.error(result.message)
