"""
In-memory caches for the title catalog and store search results.
Enhanced with statistics tracking for cache hits and misses.

Both caches live for the lifetime of the owning resolver and are never
invalidated. They are written only by the running pipeline and assume a single
run at a time.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Optional, Tuple

from feedtools.models.results import CandidateMatch

log = logging.getLogger(__name__)


class SearchCache:
    """
    Memoizes store search results per raw query string, with statistics tracking.
    """

    def __init__(self):
        self._entries: dict[str, Tuple[CandidateMatch, ...]] = {}
        self.hits = 0
        self.misses = 0

    def _record(self, is_hit: bool) -> None:
        if is_hit:
            self.hits += 1
        else:
            self.misses += 1

    def get(self, query: str) -> Optional[Tuple[CandidateMatch, ...]]:
        """Returns the cached results for a query, or None on a miss."""
        entry = self._entries.get(query)
        self._record(entry is not None)
        return entry

    def set(self, query: str, results: Iterable[CandidateMatch]) -> None:
        self._entries[query] = tuple(results)


class CatalogCache:
    """
    Maps lowercased catalog titles to App IDs.

    The cache is filled by a single successful catalog fetch. While it is
    empty, every lookup triggers a new fetch attempt by the resolver.
    """

    def __init__(self):
        self._titles: dict[str, int] = {}

    @property
    def is_populated(self) -> bool:
        return bool(self._titles)

    def populate(self, titles: Mapping[str, int]) -> None:
        """Replaces the cache contents with a freshly fetched catalog."""
        self._titles = {name.lower(): app_id for name, app_id in titles.items()}
        log.debug(f"Catalog cache populated with {len(self._titles)} titles.")

    def find_exact(self, query: str) -> Optional[int]:
        """Case-insensitive exact title lookup."""
        return self._titles.get(query.lower())

    def find_containing(
        self, query: str, limit: int = 5
    ) -> list[CandidateMatch]:
        """
        Returns up to `limit` titles that contain the lowercased query, in
        catalog order.
        """
        needle = query.lower()
        matches = []
        for title, app_id in self._titles.items():
            if needle in title:
                matches.append(CandidateMatch(name=title, app_id=app_id))
                if len(matches) >= limit:
                    break
        return matches

    def __len__(self) -> int:
        return len(self._titles)
