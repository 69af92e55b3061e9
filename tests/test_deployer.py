from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from feedtools.core.deployer import Deployer, StagedFiles
from feedtools.storage.locator import InstallationLocator


def _locator(root):
    candidates = [root] if root is not None else []
    return InstallationLocator(install_candidates=candidates, helper_search_dirs=[])


def test_staged_files_are_grouped_by_extension(tmp_path):
    staging = tmp_path / "downloads"
    (staging / "nested").mkdir(parents=True)
    (staging / "730.LUA").write_text("x")
    (staging / "nested" / "730.st").write_text("x")
    (staging / "731_1.manifest").write_text("x")
    (staging / "readme.txt").write_text("x")

    staged = StagedFiles.scan(staging)

    assert [p.name for p in staged.plugin_scripts] == ["730.LUA"]
    assert [p.name for p in staged.state_files] == ["730.st"]
    assert [p.name for p in staged.manifests] == ["731_1.manifest"]


def test_nothing_recognised_leaves_installation_untouched(tmp_path, steam_root):
    staging = tmp_path / "downloads"
    staging.mkdir()
    (staging / "notes.txt").write_text("hello")
    lines = []

    deployed = asyncio.run(Deployer(_locator(steam_root)).deploy(staging, lines.append))

    assert deployed is False
    assert lines == ["No files found to copy."]
    assert not (steam_root / "config").exists()
    assert not (steam_root / "depotcache").exists()


def test_files_are_placed_and_staging_removed(tmp_path, steam_root):
    staging = tmp_path / "downloads"
    staging.mkdir()
    (staging / "730.lua").write_text("addappid(730)")
    (staging / "730.st").write_text("state")
    (staging / "731_5555.manifest").write_text("manifest")
    deployer = Deployer(_locator(steam_root))
    lines = []

    deployed = asyncio.run(deployer.deploy(staging, lines.append))

    plugin_dir = steam_root / "config" / "stplug-in"
    manifest_dir = steam_root / "depotcache"
    assert deployed is True
    assert (plugin_dir / "730.lua").read_text() == "addappid(730)"
    assert (plugin_dir / "730.st").read_text() == "state"
    assert (manifest_dir / "731_5555.manifest").read_text() == "manifest"
    assert not (manifest_dir / "730.lua").exists()
    assert not staging.exists()
    assert deployer.copied == 3
    assert deployer.failed == 0
    assert "✓ Deleted temporary files" in lines


def test_existing_files_are_overwritten(tmp_path, steam_root):
    plugin_dir = steam_root / "config" / "stplug-in"
    plugin_dir.mkdir(parents=True)
    (plugin_dir / "730.lua").write_text("old")
    staging = tmp_path / "downloads"
    staging.mkdir()
    (staging / "730.lua").write_text("new")

    assert asyncio.run(Deployer(_locator(steam_root)).deploy(staging)) is True
    assert (plugin_dir / "730.lua").read_text() == "new"


def test_missing_installation_returns_false(tmp_path):
    staging = tmp_path / "downloads"
    staging.mkdir()
    (staging / "730.lua").write_text("x")
    lines = []

    deployed = asyncio.run(Deployer(_locator(None)).deploy(staging, lines.append))

    assert deployed is False
    assert lines[-1] == "\nCould not find Steam installation."
    assert (staging / "730.lua").exists()


def test_failed_copy_is_skipped_and_batch_continues(tmp_path, steam_root, monkeypatch):
    staging = tmp_path / "downloads"
    staging.mkdir()
    (staging / "730.lua").write_text("lua")
    (staging / "730.st").write_text("state")
    (staging / "731_1.manifest").write_text("manifest")
    real_copy2 = shutil.copy2

    def flaky_copy2(src, dst, *args, **kwargs):
        if Path(src).suffix == ".st":
            raise PermissionError("access denied")
        return real_copy2(src, dst, *args, **kwargs)

    monkeypatch.setattr(shutil, "copy2", flaky_copy2)
    deployer = Deployer(_locator(steam_root))
    lines = []

    deployed = asyncio.run(deployer.deploy(staging, lines.append))

    assert deployed is True
    assert deployer.copied == 2
    assert deployer.failed == 1
    assert "  ✗ Failed: access denied" in lines
    assert (steam_root / "config" / "stplug-in" / "730.lua").exists()
    assert not (steam_root / "config" / "stplug-in" / "730.st").exists()
    assert (steam_root / "depotcache" / "731_1.manifest").exists()


def test_failed_cleanup_is_only_a_warning(tmp_path, steam_root, monkeypatch):
    staging = tmp_path / "downloads"
    staging.mkdir()
    (staging / "730.lua").write_text("lua")

    def locked_rmtree(path, *args, **kwargs):
        raise OSError("directory in use")

    monkeypatch.setattr(shutil, "rmtree", locked_rmtree)
    lines = []

    deployed = asyncio.run(Deployer(_locator(steam_root)).deploy(staging, lines.append))

    assert deployed is True
    assert "⚠ Could not delete downloads folder: directory in use" in lines
    assert staging.exists()
    assert (steam_root / "config" / "stplug-in" / "730.lua").exists()
