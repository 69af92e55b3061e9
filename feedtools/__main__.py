"""
Entry point for `feedtools` and `python -m feedtools`.
"""

import logging
import os
import sys

from rich.console import Console

from feedtools.cli.app import CONFIG_FILE, app
from feedtools.cli.formatters import format_error_with_suggestions
from feedtools.exceptions import ConfigurationError, FeedToolsError

# Exit codes: 1 for a failed install or runtime error, 2 for a bad config.
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def _use_utf8_console() -> None:
    """The progress lines contain ✓/⚠/✗, which cp1252 consoles cannot print."""
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(encoding="utf-8")


def main() -> None:
    if os.name == "nt":
        _use_utf8_console()

    console = Console(stderr=True)
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠ Operation cancelled.[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except ConfigurationError as e:
        console.print(format_error_with_suggestions(e, {"config_file": str(CONFIG_FILE)}))
        sys.exit(EXIT_CONFIG)
    except FeedToolsError as e:
        console.print(format_error_with_suggestions(e))
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        logging.getLogger("feedtools").debug("Full traceback:", exc_info=True)
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
