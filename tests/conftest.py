from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest

from feedtools.models.results import CandidateMatch, PipelineResult


class RecordingSink:
    """Progress sink that keeps everything it receives."""

    def __init__(self) -> None:
        self.lines: List[str] = []
        self.statuses: List[str] = []
        self.selections: List[Tuple[CandidateMatch, ...]] = []
        self.errors: List[str] = []
        self.results: List[PipelineResult] = []

    def log(self, message: str) -> None:
        self.lines.append(message)

    def status(self, label: str) -> None:
        self.statuses.append(label)

    def show_selection(self, candidates: Sequence[CandidateMatch]) -> None:
        self.selections.append(tuple(candidates))

    def search_error(self, message: str) -> None:
        self.errors.append(message)

    def complete(self, result: PipelineResult) -> None:
        self.results.append(result)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class FakeProcessControl:
    """Records kill/launch calls in order instead of touching real processes."""

    def __init__(self, launch_ok: bool = True) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.launch_ok = launch_ok

    async def kill(self, image_name: str) -> bool:
        self.calls.append(("kill", image_name))
        return True

    async def launch(self, executable: Path) -> bool:
        self.calls.append(("launch", str(executable)))
        return self.launch_ok


def build_zip(entries: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


def search_page(rows: Sequence[Tuple[str, str]]) -> str:
    """Renders a minimal store search page with one result row per (id, title)."""
    body = "".join(
        f'<a href="https://store.steampowered.com/app/{app_id}/x/" '
        f'data-ds-appid="{app_id}" class="search_result_row">'
        f'<div class="search_name"><span class="title">{title}</span></div></a>'
        for app_id, title in rows
    )
    return f'<html><body><div id="search_resultsRows">{body}</div></body></html>'


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def process_control() -> FakeProcessControl:
    return FakeProcessControl()


@pytest.fixture
def steam_root(tmp_path: Path) -> Path:
    root = tmp_path / "Steam"
    root.mkdir()
    (root / "steam.exe").write_bytes(b"")
    return root


@pytest.fixture
def helper_exe(tmp_path: Path) -> Path:
    helper_dir = tmp_path / "SteamTools"
    helper_dir.mkdir()
    exe = helper_dir / "SteamTools.exe"
    exe.write_bytes(b"")
    return exe
