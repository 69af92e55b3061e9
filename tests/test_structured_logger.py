from __future__ import annotations

import json

from feedtools.utils.structured_logger import StructuredLogger, create_run_logger


def test_run_events_are_written_as_json_lines(tmp_path):
    base, runs = create_run_logger(tmp_path / "logs", enable_json=True)
    with base:
        runs.run_started(730)
        runs.stage_started(730, "download")
        runs.stage_completed(730, "download", True)
        runs.run_completed(730, True, "done", 1.234)

    lines = base.json_log_path.read_text(encoding="utf-8").splitlines()
    events = [json.loads(line) for line in lines]

    assert [e["event"] for e in events] == [
        "run_started",
        "stage_started",
        "stage_completed",
        "run_completed",
    ]
    assert events[2]["stage"] == "download"
    assert events[2]["ok"] is True
    assert events[3]["duration_s"] == 1.23
    assert events[3]["level"] == "INFO"
    assert len({e["session_id"] for e in events}) == 1


def test_failed_run_is_logged_as_error(tmp_path):
    base, runs = create_run_logger(tmp_path, enable_json=True)
    runs.run_completed(440, False, "Could not download game data", 0.5)
    base.close()

    event = json.loads(base.json_log_path.read_text(encoding="utf-8"))
    assert event["level"] == "ERROR"
    assert event["message"] == "Could not download game data"


def test_json_disabled_without_directory():
    logger = StructuredLogger("feedtools.test", log_dir=None, enable_json=True)
    logger.info("ignored", value=1)
    logger.close()

    assert logger.enable_json is False
    assert logger.json_log_path is None
