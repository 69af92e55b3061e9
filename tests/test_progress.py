from __future__ import annotations

import asyncio
import logging

from rich.console import Console

from feedtools.cli.formatters import format_error_with_suggestions, print_candidates_table
from feedtools.cli.progress_manager import ProgressManager
from feedtools.core.reporting import LoggingSink
from feedtools.exceptions import InstallationNotFoundError
from feedtools.models.results import CandidateMatch, PipelineResult
from feedtools.utils.formatting import format_duration, truncate


def _console():
    return Console(record=True, width=120, force_terminal=False)


def test_progress_manager_records_events():
    console = _console()

    async def _run():
        async with ProgressManager(console, quiet=True) as progress:
            progress.status("Downloading files...")
            progress.log("✓ Steam closed")
            progress.show_selection([CandidateMatch("Portal", 400)])
            progress.search_error("No game found for: x")
            progress.complete(PipelineResult(True, "ok"))
        return progress

    progress = asyncio.run(_run())

    assert progress.current_status == "Downloading files..."
    assert progress.candidates == (CandidateMatch("Portal", 400),)
    assert progress.search_error_message == "No game found for: x"
    assert progress.result == PipelineResult(True, "ok")
    assert progress.get_statistics() == {"log_lines": 1, "stages": 1}
    assert "No game found for: x" in console.export_text()


def test_progress_manager_prints_log_lines_verbatim():
    console = _console()
    progress = ProgressManager(console)

    progress.log("[2/5] Downloading 730.zip from server storage...")

    assert "[2/5] Downloading 730.zip" in console.export_text()


def test_logging_sink_forwards_to_logger(caplog):
    sink = LoggingSink(logging.getLogger("feedtools.test"))

    with caplog.at_level(logging.INFO, logger="feedtools.test"):
        sink.log("Download complete")
        sink.show_selection([CandidateMatch("Half-Life", 70)])
        sink.complete(PipelineResult(False, "Could not download game data"))

    messages = [record.getMessage() for record in caplog.records]
    assert "Download complete" in messages
    assert "  70: Half-Life" in messages
    assert caplog.records[-1].levelno == logging.ERROR


def test_candidates_table_and_error_panel_render():
    console = _console()

    print_candidates_table(
        [CandidateMatch("Half-Life", 70, "https://store.steampowered.com/app/70/")],
        "Half Life",
        console,
    )
    console.print(format_error_with_suggestions(InstallationNotFoundError("no Steam")))

    text = console.export_text()
    assert "Half-Life" in text
    assert "InstallationNotFoundError: no Steam" in text
    assert "install_root" in text


def test_formatting_helpers():
    assert format_duration(0) == "0s"
    assert format_duration(132) == "2m 12s"
    assert format_duration(3600) == "1h"
    assert truncate("Half-Life", 20) == "Half-Life"
    assert truncate("Half-Life 2: Episode Two", 10) == "Half-Life…"
