"""
Fetches the full Steam app list used as the fallback title catalog.
"""

import logging
from typing import Optional

import aiohttp

from feedtools.exceptions import ParseError
from feedtools.storage.cache import CatalogCache

from .base import BaseStoreClient

log = logging.getLogger(__name__)


class CatalogClient(BaseStoreClient):
    """Lazily loads the public app list into a CatalogCache."""

    def __init__(
        self,
        catalog_url: str,
        cache: Optional[CatalogCache] = None,
        timeout: float = 15,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(session)
        self.catalog_url = catalog_url
        self.cache = cache if cache is not None else CatalogCache()
        self.timeout = timeout

    async def ensure_loaded(self) -> CatalogCache:
        """
        Populates the cache on first use. A failed fetch leaves the cache empty so
        the next call tries again.
        """
        if self.cache.is_populated:
            return self.cache

        try:
            payload = await self._get_json(self.catalog_url, timeout=self.timeout)
            titles = self._parse_app_list(payload)
        except Exception as e:
            log.warning(f"Error fetching app list: {e}")
            return self.cache

        self.cache.populate(titles)
        return self.cache

    @staticmethod
    def _parse_app_list(payload) -> dict[str, int]:
        try:
            apps = payload["applist"]["apps"]
        except (KeyError, TypeError) as e:
            raise ParseError(f"Unexpected app list payload: missing {e}") from e

        titles: dict[str, int] = {}
        for app in apps:
            name = app.get("name")
            app_id = app.get("appid")
            if not name or not isinstance(app_id, int):
                continue
            # First entry wins when several apps share a title.
            titles.setdefault(name.lower(), app_id)
        return titles
