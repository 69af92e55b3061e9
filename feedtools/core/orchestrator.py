"""
Drives a resolved App ID through download, deployment and the Steam restart.
"""

import asyncio
import logging
import shutil
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional

from feedtools.api.details import DetailsClient
from feedtools.media.archive_fetcher import ArchiveFetcher
from feedtools.models.config import PipelineConfig
from feedtools.models.results import PipelineResult
from feedtools.storage.locator import InstallationLocator
from feedtools.utils.structured_logger import RunLogger, StructuredLogger

from .deployer import Deployer
from .process_control import ProcessControl
from .reporting import ProgressSink

log = logging.getLogger(__name__)

BANNER = "=" * 60


class ProcessOrchestrator:
    """
    Runs the post-resolution sequence for one App ID.

    Stages are strictly sequential: store details (best-effort), archive
    download, deployment, then the restart of Steam and its helper. Nothing is
    raised to the caller; the outcome is a single PipelineResult that is also
    delivered to the sink.
    """

    def __init__(
        self,
        config: PipelineConfig,
        details_client: DetailsClient,
        archive_fetcher: ArchiveFetcher,
        deployer: Deployer,
        locator: InstallationLocator,
        process_control: ProcessControl,
        run_logger: Optional[RunLogger] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.details_client = details_client
        self.archive_fetcher = archive_fetcher
        self.deployer = deployer
        self.locator = locator
        self.process_control = process_control
        self.run_logger = run_logger or RunLogger(
            StructuredLogger("feedtools.runs", enable_json=False)
        )
        self._sleep = sleep

    @property
    def staging_dir(self) -> Path:
        return Path(self.config.staging_dir)

    async def run(self, app_id: int, sink: ProgressSink) -> PipelineResult:
        start_time = time.monotonic()
        self.run_logger.run_started(app_id)
        try:
            result = await self._run_stages(app_id, sink)
        except Exception as e:
            log.error(
                f"[red]✗ Unexpected error while processing App ID {app_id}: {e}[/red]",
                exc_info=log.getEffectiveLevel() == logging.DEBUG,
            )
            sink.log(f"Fatal Error: {e}")
            result = PipelineResult(success=False, message=f"Fatal Error: {e}")
        finally:
            await self._discard_staging()

        self.run_logger.run_completed(
            app_id, result.success, result.message, time.monotonic() - start_time
        )
        sink.complete(result)
        return result

    async def _run_stages(self, app_id: int, sink: ProgressSink) -> PipelineResult:
        sink.log(f"\n{BANNER}\nProcessing App ID: {app_id}\n{BANNER}")

        # 1. Store details are informational only.
        sink.status("Getting game details...")
        sink.log("\n[1/5] Fetching store details...")
        self.run_logger.stage_started(app_id, "details")
        details = await self.details_client.fetch(app_id)
        self.run_logger.stage_completed(app_id, "details", details is not None)
        if details:
            sink.log(f"Found: {details.name}")
        else:
            sink.log("Store details not available")

        # 2. Archive
        sink.status("Downloading files...")
        self.run_logger.stage_started(app_id, "download")
        downloaded = await self.archive_fetcher.fetch(
            app_id, self.staging_dir, sink.log
        )
        self.run_logger.stage_completed(app_id, "download", downloaded)
        if not downloaded:
            return PipelineResult(success=False, message="Could not download game data")
        sink.log("Download complete")

        # 3. Deployment. A failure is logged; the restart and result are unaffected.
        sink.status("Installing files...")
        self.run_logger.stage_started(app_id, "deploy")
        deployed = await self.deployer.deploy(self.staging_dir, sink.log)
        self.run_logger.stage_completed(app_id, "deploy", deployed)
        if deployed:
            sink.log("Files installed")
        else:
            log.warning(f"[yellow]No files were deployed for App ID {app_id}.[/yellow]")
            sink.log("⚠ No files were installed")

        # 4-6. Restart
        sink.status("Restarting Steam components...")
        sink.log("\n[5/5] Restarting Steam components...")
        self.run_logger.stage_started(app_id, "restart")
        await self._stop_target(sink)
        await self._cycle_helper(sink)
        started = await self._start_target(sink)
        self.run_logger.stage_completed(app_id, "restart", started)

        sink.status("Complete!")
        sink.log(f"\n{BANNER}\n✓ Complete!\n{BANNER}")

        return PipelineResult(
            success=True, message="Installation complete! Steam has been restarted."
        )

    async def _stop_target(self, sink: ProgressSink) -> None:
        """Force-closes Steam. A Steam that is not running is not an error."""
        await self.process_control.kill(self.config.target_process)
        await self._sleep(self.config.close_settle_delay)
        sink.log("✓ Steam closed")
        await self._sleep(self.config.post_close_delay)

    async def _cycle_helper(self, sink: ProgressSink) -> bool:
        """
        Launches SteamTools, lets it run briefly, then kills it by name.

        The kill matches by process name, so it also ends the instance that was
        just started, not only a stale one from an earlier run.
        """
        launched = False
        helper = await asyncio.to_thread(self.locator.find_helper_executable)
        if helper is None:
            sink.log(f"⚠ {self.config.helper_executable} not found. Skipping launch.")
        else:
            launched = await self.process_control.launch(helper)
            if launched:
                await self._sleep(self.config.helper_run_delay)
                sink.log("✓ SteamTools launched")
            else:
                sink.log("⚠ Could not launch SteamTools")

        await self.process_control.kill(self.config.helper_process)
        await self._sleep(self.config.post_helper_delay)
        return launched

    async def _start_target(self, sink: ProgressSink) -> bool:
        """Starts Steam from its installation root. Quietly no-ops if it is missing."""
        targets = await asyncio.to_thread(self.locator.deployment_targets)
        if targets is None:
            log.debug("Cannot start Steam: installation not found.")
            return False

        steam_exe = targets.root / self.config.target_executable
        if not steam_exe.is_file():
            log.debug(f"Cannot start Steam: '{steam_exe}' does not exist.")
            return False

        launched = await self.process_control.launch(steam_exe)
        await self._sleep(self.config.start_settle_delay)
        if launched:
            sink.log("✓ Steam started")
        return launched

    async def _discard_staging(self) -> None:
        """Removes a staging directory left behind by a run that ended early."""
        staging = self.staging_dir
        if not staging.exists():
            return
        try:
            await asyncio.to_thread(shutil.rmtree, staging)
            log.debug(f"Removed leftover staging directory '{staging}'.")
        except OSError as e:
            log.warning(f"Could not remove staging directory '{staging}': {e}")
