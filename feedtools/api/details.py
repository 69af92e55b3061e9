"""
Best-effort client for the Steam store appdetails endpoint.
"""

import logging
from typing import Optional

import aiohttp

from feedtools.models.results import AppDetails

from .base import BaseStoreClient

log = logging.getLogger(__name__)


class DetailsClient(BaseStoreClient):
    def __init__(
        self,
        details_url: str,
        timeout: float = 10,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(session)
        self.details_url = details_url
        self.timeout = timeout

    async def fetch(self, app_id: int) -> Optional[AppDetails]:
        """Returns store details for an App ID, or None if they are unavailable."""
        try:
            payload = await self._get_json(
                self.details_url, timeout=self.timeout, params={"appids": app_id}
            )
            entry = payload.get(str(app_id)) or {}
            if entry.get("success") and isinstance(entry.get("data"), dict):
                return AppDetails.from_api(app_id, entry["data"])
            log.debug(f"No store details returned for App ID {app_id}.")
        except Exception as e:
            log.debug(f"Error fetching app details for {app_id}: {e}")
        return None
