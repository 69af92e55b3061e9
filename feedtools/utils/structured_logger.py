"""
Run event logging: every event goes to the regular `logging` tree as a short
`[event] key=value` line and, when enabled, to a JSON-lines file for later
analysis.
"""

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class JsonLinesHandler(logging.FileHandler):
    """Writes one JSON object per record; event fields travel in `record.fields`."""

    def __init__(self, path: Path, static_fields: dict[str, Any] | None = None):
        super().__init__(path, mode="a", encoding="utf-8")
        self.static_fields = static_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "event": record.getMessage(),
            **self.static_fields,
            **getattr(record, "fields", {}),
        }
        return json.dumps(entry, default=str)


class StructuredLogger:
    """
    Emits named events with keyword context.

        logger = StructuredLogger("feedtools.runs", log_dir=Path("logs"))
        logger.info("stage_completed", app_id=730, stage="deploy", ok=True)

    The JSON file receives every event regardless of the console log level.
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
    ):
        self.name = name
        self.enable_json = enable_json and log_dir is not None
        self.json_log_path: Path | None = None
        self.session_id = f"{int(time.time())}_{id(self)}"

        self._logger = logging.getLogger(name)
        self._handler: JsonLinesHandler | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"feedtools_{stamp}.jsonl"
            self._handler = JsonLinesHandler(
                self.json_log_path, {"session_id": self.session_id}
            )

    def _emit(self, level: int, event: str, **context) -> None:
        details = " ".join(f"{key}={value}" for key, value in context.items())
        self._logger.log(level, f"[{event}] {details}".rstrip())

        if self._handler is not None:
            record = logging.LogRecord(
                self.name, level, "", 0, event, None, None
            )
            record.fields = context
            self._handler.handle(record)

    def debug(self, event: str, **context) -> None:
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        if self._handler is not None:
            self._handler.close()
            self._handler = None

    def __enter__(self) -> "StructuredLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


class RunLogger:
    """Pipeline run events, with per-stage timing."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger
        self._stage_started: dict[str, float] = {}

    def run_started(self, app_id: int):
        self.logger.info("run_started", app_id=app_id)

    def stage_started(self, app_id: int, stage: str):
        self._stage_started[stage] = time.monotonic()
        self.logger.debug("stage_started", app_id=app_id, stage=stage)

    def stage_completed(self, app_id: int, stage: str, ok: bool):
        started = self._stage_started.pop(stage, None)
        elapsed = time.monotonic() - started if started is not None else 0.0
        self.logger.debug(
            "stage_completed", app_id=app_id, stage=stage, ok=ok, duration_s=round(elapsed, 2)
        )

    def run_completed(self, app_id: int, success: bool, message: str, duration_s: float):
        emit = self.logger.info if success else self.logger.error
        emit(
            "run_completed",
            app_id=app_id,
            success=success,
            message=message,
            duration_s=round(duration_s, 2),
        )


def create_run_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, RunLogger]:
    """Returns the base logger (which owns the JSON file) and its RunLogger."""
    base = StructuredLogger("feedtools.runs", log_dir=log_dir, enable_json=enable_json)
    return base, RunLogger(base)
