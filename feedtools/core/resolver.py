"""
Turns a free-form query into an App ID, a candidate list, or nothing.
"""

import logging

from feedtools.api.catalog import CatalogClient
from feedtools.api.store_search import StoreSearchClient
from feedtools.models.results import (
    MultipleMatches,
    NoMatch,
    ResolvedTarget,
    SingleMatch,
)
from feedtools.utils.url import extract_app_id, is_numeric_id, is_store_url

log = logging.getLogger(__name__)


class GameResolver:
    """
    Resolves a query by trying, in order: a Steam URL, a bare App ID, the live
    store search and finally the bulk app list.

    URL and numeric input never touch the network. The store search is ranked
    and tried before the catalog, which only supports exact and substring
    matching.
    """

    def __init__(
        self,
        search_client: StoreSearchClient,
        catalog_client: CatalogClient,
        match_limit: int = 5,
    ):
        self.search_client = search_client
        self.catalog_client = catalog_client
        self.match_limit = match_limit

    async def resolve(self, query: str) -> ResolvedTarget:
        """Never raises; any failure degrades to `NoMatch`."""
        try:
            return await self._resolve(query)
        except Exception as e:
            log.error(f"[red]Error resolving '{query}': {e}[/red]")
            log.debug("Full traceback:", exc_info=True)
            return NoMatch()

    async def _resolve(self, query: str) -> ResolvedTarget:
        if is_store_url(query):
            app_id = extract_app_id(query)
            if app_id is not None:
                log.debug(f"Resolved '{query}' from URL to App ID {app_id}.")
                return SingleMatch(app_id)

        if is_numeric_id(query):
            return SingleMatch(int(query.strip()))

        web_results = await self.search_client.search(query)
        if len(web_results) == 1:
            return SingleMatch(web_results[0].app_id)
        if web_results:
            return MultipleMatches(tuple(web_results))

        return await self._resolve_from_catalog(query)

    async def _resolve_from_catalog(self, query: str) -> ResolvedTarget:
        catalog = await self.catalog_client.ensure_loaded()
        if not catalog.is_populated:
            return NoMatch()

        exact = catalog.find_exact(query)
        if exact is not None:
            return SingleMatch(exact)

        matches = catalog.find_containing(query, limit=self.match_limit)
        if matches:
            return MultipleMatches(tuple(matches))
        return NoMatch()
