"""
Discovers the local Steam installation and the SteamTools helper executable.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from feedtools.exceptions import InstallationNotFoundError
from feedtools.models.config import MANIFEST_SUBDIR, PLUGIN_SUBDIR
from feedtools.models.results import DeploymentTargets

log = logging.getLogger(__name__)


def default_install_candidates() -> list[Path]:
    """Platform-conventional Steam locations, in lookup order."""
    candidates = []
    if env_path := os.environ.get("STEAM_PATH"):
        candidates.append(Path(env_path))
    candidates.extend(
        [
            Path(os.environ.get("PROGRAMFILES(X86)", "C:\\Program Files (x86)"))
            / "Steam",
            Path(os.environ.get("PROGRAMFILES", "C:\\Program Files")) / "Steam",
            Path("C:\\Program Files (x86)\\Steam"),
            Path("C:\\Program Files\\Steam"),
            Path.home() / ".steam" / "steam",
            Path.home() / ".local" / "share" / "Steam",
        ]
    )
    return candidates


def default_helper_search_dirs() -> list[Path]:
    """Folders that are searched recursively for the SteamTools executable."""
    home = Path.home()
    return [
        Path.cwd() / "SteamTools",
        home / "Desktop" / "SteamTools",
        home / "Documents" / "SteamTools",
        home / "Downloads" / "SteamTools",
        home / "AppData" / "Local" / "SteamTools",
        home / "AppData" / "Roaming" / "SteamTools",
        Path("C:\\SteamTools"),
        Path("D:\\SteamTools"),
    ]


def find_file_recursive(directory: Path, filename: str) -> Optional[Path]:
    """Case-insensitive recursive search for a file name. Unreadable folders are skipped."""
    target = filename.lower()
    for root, _dirs, files in os.walk(directory, onerror=lambda e: None):
        for name in files:
            if name.lower() == target:
                return Path(root) / name
    return None


class InstallationLocator:
    """
    Finds the Steam installation root and memoizes it for the locator's lifetime.

    The lookup is never invalidated: a Steam installation that appears after
    the first successful lookup is only noticed by a new locator.
    """

    def __init__(
        self,
        install_root: str = "",
        helper_path: str = "",
        helper_executable: str = "SteamTools.exe",
        install_candidates: Optional[Iterable[Path]] = None,
        helper_search_dirs: Optional[Iterable[Path]] = None,
    ):
        self.install_root = install_root
        self.helper_path = helper_path
        self.helper_executable = helper_executable
        self._install_candidates = (
            list(install_candidates) if install_candidates is not None else None
        )
        self._helper_search_dirs = (
            list(helper_search_dirs) if helper_search_dirs is not None else None
        )
        self._targets: Optional[DeploymentTargets] = None
        self._helper: Optional[Path] = None

    def _candidates(self) -> list[Path]:
        candidates = []
        if self.install_root:
            candidates.append(Path(self.install_root))
        if self._install_candidates is not None:
            candidates.extend(self._install_candidates)
        else:
            candidates.extend(default_install_candidates())
        return candidates

    def find_install_root(self) -> Optional[Path]:
        """Returns the first existing Steam directory, or None."""
        targets = self.deployment_targets()
        return targets.root if targets else None

    def deployment_targets(self) -> Optional[DeploymentTargets]:
        """Resolves the installation root and its deployment folders (memoized)."""
        if self._targets is not None:
            return self._targets

        for candidate in self._candidates():
            expanded = Path(os.path.expandvars(str(candidate))).expanduser()
            if expanded.is_dir():
                root = expanded.resolve()
                self._targets = DeploymentTargets(
                    root=root,
                    plugin_dir=root.joinpath(*PLUGIN_SUBDIR),
                    manifest_dir=root.joinpath(*MANIFEST_SUBDIR),
                )
                log.debug(f"Steam path resolved to {root}")
                return self._targets

        log.debug("No Steam installation found in any candidate location.")
        return None

    def require_targets(self) -> DeploymentTargets:
        """Like `deployment_targets`, but a missing installation is an error."""
        targets = self.deployment_targets()
        if targets is None:
            raise InstallationNotFoundError(
                "No Steam installation found; set install_root in the configuration."
            )
        return targets

    def find_helper_executable(self) -> Optional[Path]:
        """Returns the path of the SteamTools executable, if one can be found."""
        if self._helper is not None and self._helper.is_file():
            return self._helper

        if self.helper_path:
            configured = Path(self.helper_path).expanduser()
            if configured.is_file():
                self._helper = configured
                return self._helper

        search_dirs = (
            self._helper_search_dirs
            if self._helper_search_dirs is not None
            else default_helper_search_dirs()
        )
        for base_path in search_dirs:
            if base_path.is_dir():
                found = find_file_recursive(base_path, self.helper_executable)
            elif base_path.name.lower() == self.helper_executable.lower():
                found = base_path if base_path.is_file() else None
            else:
                found = None
            if found:
                log.debug(f"Found {self.helper_executable} at {found}")
                self._helper = found
                return found
        return None
