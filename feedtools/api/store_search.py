"""
Scrapes the Steam store search page to turn free text into candidate App IDs.
"""

import logging
import re
from typing import Optional, Tuple
from urllib.parse import urljoin

import aiohttp
from bs4 import BeautifulSoup

from feedtools.models.results import CandidateMatch
from feedtools.storage.cache import SearchCache

from .base import BROWSER_HEADERS, BaseStoreClient

log = logging.getLogger(__name__)

_APP_PATH_REGEX = re.compile(r"/app/([0-9]+)/")
MAX_NAME_LENGTH = 100


class StoreSearchClient(BaseStoreClient):
    """Searches the Steam store by title, memoizing results per query."""

    def __init__(
        self,
        search_url: str,
        cache: Optional[SearchCache] = None,
        timeout: float = 15,
        limit: int = 10,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(session)
        self.search_url = search_url
        self.cache = cache if cache is not None else SearchCache()
        self.timeout = timeout
        self.limit = limit

    async def search(self, query: str) -> Tuple[CandidateMatch, ...]:
        """
        Returns the store's matches for a query, in page order and without
        duplicate App IDs. Failures yield an empty result that is not cached.
        """
        cached = self.cache.get(query)
        if cached is not None:
            log.debug(f"Store search for '{query}' served from cache.")
            return cached

        try:
            html = await self._get_text(
                self.search_url,
                timeout=self.timeout,
                params={"term": query},
                headers=BROWSER_HEADERS,
            )
            results = self.parse_results(html)
        except Exception as e:
            log.warning(f"Error searching Steam store for '{query}': {e}")
            return ()

        log.debug(f"Store search for '{query}' returned {len(results)} result(s).")
        self.cache.set(query, results)
        return results

    def parse_results(self, html: str) -> Tuple[CandidateMatch, ...]:
        """Parses a search results page into unique candidate matches."""
        soup = BeautifulSoup(html, "html.parser")
        results = self._parse_result_rows(soup)
        if not results:
            results = self._parse_app_links(soup)

        unique: dict[int, CandidateMatch] = {}
        for match in results:
            unique.setdefault(match.app_id, match)
        return tuple(unique.values())

    def _parse_result_rows(self, soup: BeautifulSoup) -> list[CandidateMatch]:
        """Reads the regular result rows, which carry the App ID as a data attribute."""
        results = []
        for row in soup.find_all("a", attrs={"data-ds-appid": True})[: self.limit]:
            app_id = (row.get("data-ds-appid") or "").split(",")[0].strip()
            if not (app_id.isascii() and app_id.isdigit()):
                continue
            title_span = row.find("span", class_="title")
            if not title_span:
                continue
            name = title_span.get_text().strip()
            if not name:
                continue
            results.append(
                CandidateMatch(
                    name=name, app_id=int(app_id), url=row.get("href") or None
                )
            )
        return results

    def _parse_app_links(self, soup: BeautifulSoup) -> list[CandidateMatch]:
        """Fallback: any link whose path contains /app/<id>/."""
        results = []
        for link in soup.find_all("a", href=True):
            href = link["href"]
            match = _APP_PATH_REGEX.search(href)
            if not match:
                continue
            app_id = match.group(1)
            name = link.get_text().strip()[:MAX_NAME_LENGTH] or f"App {app_id}"
            results.append(
                CandidateMatch(
                    name=name, app_id=int(app_id), url=urljoin(self.search_url, href)
                )
            )
        return results
