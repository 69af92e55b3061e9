"""
The entry points a front end uses to drive an installation.
"""

import logging
from typing import Optional

import aiohttp

from feedtools.api.catalog import CatalogClient
from feedtools.api.details import DetailsClient
from feedtools.api.store_search import StoreSearchClient
from feedtools.exceptions import PipelineBusyError
from feedtools.media.archive_fetcher import ArchiveFetcher
from feedtools.models.config import PipelineConfig
from feedtools.models.results import (
    MultipleMatches,
    NoMatch,
    PipelineResult,
    ResolvedTarget,
    SingleMatch,
)
from feedtools.storage.cache import CatalogCache, SearchCache
from feedtools.storage.locator import InstallationLocator
from feedtools.utils.structured_logger import RunLogger

from .deployer import Deployer
from .orchestrator import ProcessOrchestrator
from .process_control import ProcessControl, SystemProcessControl
from .reporting import ProgressSink
from .resolver import GameResolver

log = logging.getLogger(__name__)

BUSY_MESSAGE = "Another installation is already in progress."


class Pipeline:
    """
    Owns the lookup caches, the installation locator and the run guard.

    One Pipeline serves the whole process. Resolution and installation are two
    separate calls: when a query is ambiguous the caller receives the
    candidates and comes back later with `confirm_selection`. No resolver state
    is kept between the two besides the caches.
    """

    def __init__(
        self,
        config: PipelineConfig,
        process_control: Optional[ProcessControl] = None,
        locator: Optional[InstallationLocator] = None,
        session: Optional[aiohttp.ClientSession] = None,
        run_logger: Optional[RunLogger] = None,
    ):
        self.config = config
        self.search_cache = SearchCache()
        self.catalog_cache = CatalogCache()
        self.locator = locator or InstallationLocator(
            install_root=config.install_root,
            helper_path=config.helper_path,
            helper_executable=config.helper_executable,
        )

        self.search_client = StoreSearchClient(
            config.store_search_url,
            cache=self.search_cache,
            timeout=config.search_timeout,
            limit=config.search_limit,
            session=session,
        )
        self.catalog_client = CatalogClient(
            config.catalog_url,
            cache=self.catalog_cache,
            timeout=config.catalog_timeout,
            session=session,
        )
        self.details_client = DetailsClient(
            config.details_url, timeout=config.details_timeout, session=session
        )
        self.archive_fetcher = ArchiveFetcher(
            config.archive_base_url, timeout=config.archive_timeout, session=session
        )

        self.resolver = GameResolver(
            self.search_client,
            self.catalog_client,
            match_limit=config.catalog_match_limit,
        )
        self.orchestrator = ProcessOrchestrator(
            config,
            self.details_client,
            self.archive_fetcher,
            Deployer(self.locator),
            self.locator,
            process_control or SystemProcessControl(),
            run_logger=run_logger,
        )
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def resolve(self, query: str) -> ResolvedTarget:
        return await self.resolver.resolve(query)

    async def submit_query(
        self, query: str, sink: ProgressSink
    ) -> Optional[PipelineResult]:
        """
        Resolves a query and, when it is unambiguous, installs it right away.

        Returns the run's result, or None when the caller has to act first
        (nothing found, or a selection is required).
        """
        sink.status("Searching for game...")
        sink.log(f"Searching: {query}")

        target = await self.resolve(query)

        if isinstance(target, NoMatch):
            sink.search_error(f"No game found for: {query}")
            return None
        if isinstance(target, MultipleMatches):
            sink.show_selection(target.candidates)
            return None
        if isinstance(target, SingleMatch):
            return await self.start_pipeline(target.app_id, sink)
        raise TypeError(f"Unexpected resolution result: {target!r}")

    async def start_pipeline(self, app_id: int, sink: ProgressSink) -> PipelineResult:
        """Runs download, deployment and restart for an App ID."""
        try:
            self._acquire()
        except PipelineBusyError as e:
            log.warning(f"[yellow]Rejected App ID {app_id}: {e}[/yellow]")
            result = PipelineResult(success=False, message=str(e))
            sink.complete(result)
            return result

        try:
            return await self.orchestrator.run(app_id, sink)
        finally:
            self._running = False

    async def confirm_selection(
        self, app_id: int, sink: ProgressSink
    ) -> PipelineResult:
        """Continues with the candidate the user picked after `show_selection`."""
        sink.log(f"Selected App ID: {app_id}")
        return await self.start_pipeline(int(app_id), sink)

    def helper_available(self) -> bool:
        """Reports whether the SteamTools executable can be located."""
        return self.locator.find_helper_executable() is not None

    def _acquire(self) -> None:
        if self._running:
            raise PipelineBusyError(BUSY_MESSAGE)
        self._running = True

    async def aclose(self) -> None:
        """Closes every HTTP session the pipeline's clients opened."""
        for client in (
            self.search_client,
            self.catalog_client,
            self.details_client,
            self.archive_fetcher,
        ):
            await client.close()

    async def __aenter__(self) -> "Pipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
