"""
Copies staged files into the Steam installation and purges the staging area.
"""

import asyncio
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from feedtools.exceptions import InstallationNotFoundError
from feedtools.storage.locator import InstallationLocator

log = logging.getLogger(__name__)

PLUGIN_EXTENSIONS = (".lua",)
STATE_EXTENSIONS = (".st",)
MANIFEST_EXTENSIONS = (".manifest",)


@dataclass
class StagedFiles:
    """Files found in the staging directory, grouped by destination class."""

    plugin_scripts: list[Path] = field(default_factory=list)
    state_files: list[Path] = field(default_factory=list)
    manifests: list[Path] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.plugin_scripts or self.state_files or self.manifests)

    @classmethod
    def scan(cls, staging_dir: Path) -> "StagedFiles":
        staged = cls()
        if not staging_dir.is_dir():
            return staged
        for path in sorted(staging_dir.rglob("*")):
            if not path.is_file():
                continue
            suffix = path.suffix.lower()
            if suffix in PLUGIN_EXTENSIONS:
                staged.plugin_scripts.append(path)
            elif suffix in STATE_EXTENSIONS:
                staged.state_files.append(path)
            elif suffix in MANIFEST_EXTENSIONS:
                staged.manifests.append(path)
        return staged


class Deployer:
    """Places plugin scripts, state files and manifests into their Steam folders."""

    def __init__(self, locator: InstallationLocator):
        self.locator = locator
        self.copied = 0
        self.failed = 0

    async def deploy(
        self,
        staging_dir: Path,
        log_callback: Optional[Callable[[str], None]] = None,
    ) -> bool:
        """
        Deploys everything in `staging_dir`, then deletes it.

        Returns True once at least one file was queued for copying, regardless of
        individual copy failures. Returns False when nothing was staged or Steam
        could not be found; in both cases the installation is left untouched.
        """
        return await asyncio.to_thread(self._deploy, staging_dir, log_callback)

    def _deploy(
        self,
        staging_dir: Path,
        log_callback: Optional[Callable[[str], None]],
    ) -> bool:
        def emit(message: str) -> None:
            if log_callback:
                log_callback(message)

        self.copied = 0
        self.failed = 0
        staging_dir = staging_dir.resolve()
        staged = StagedFiles.scan(staging_dir)

        if staged.is_empty:
            emit("No files found to copy.")
            return False

        emit("\n[3/5] Copying files to Steam...")

        try:
            targets = self.locator.require_targets()
        except InstallationNotFoundError as e:
            log.warning(f"[yellow]{e}[/yellow]")
            emit("\nCould not find Steam installation.")
            return False

        targets.plugin_dir.mkdir(parents=True, exist_ok=True)
        targets.manifest_dir.mkdir(parents=True, exist_ok=True)

        plugin_files = staged.plugin_scripts + staged.state_files
        if plugin_files:
            emit("\nCopying plugin file(s) to config/stplug-in...")
            self._copy_all(plugin_files, targets.plugin_dir, emit)

        if staged.manifests:
            emit("\nCopying manifest file(s) to depotcache...")
            self._copy_all(staged.manifests, targets.manifest_dir, emit)

        log.info(
            f"Deployed {self.copied} file(s) to {targets.root}"
            + (f", {self.failed} failed" if self.failed else "")
        )

        emit("\n[4/5] Cleaning up...")
        try:
            shutil.rmtree(staging_dir)
            emit("✓ Deleted temporary files")
        except OSError as e:
            log.warning(f"Could not delete staging directory '{staging_dir}': {e}")
            emit(f"⚠ Could not delete downloads folder: {e}")

        return True

    def _copy_all(
        self, files: list[Path], destination: Path, emit: Callable[[str], None]
    ) -> None:
        for file_path in files:
            try:
                shutil.copy2(file_path, destination / file_path.name)
                self.copied += 1
            except OSError as e:
                self.failed += 1
                log.debug(f"Copy of '{file_path}' to '{destination}' failed: {e}")
                emit(f"  ✗ Failed: {e}")
