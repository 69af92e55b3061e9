"""
Shared aiohttp session handling for the Steam endpoint clients.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from feedtools.exceptions import NetworkError

log = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
}


class BaseStoreClient:
    """
    Base class for the async Steam clients.

    A client either borrows a session passed in by the caller or lazily opens
    its own, which it then closes in `close()`.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=8,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session if this client opened it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _get(
        self,
        url: str,
        timeout: float,
        params: Optional[Dict[str, Any]],
        headers: Optional[Dict[str, str]],
        as_json: bool,
    ) -> Any:
        session = await self._initialize_session()
        try:
            async with session.get(
                url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as r:
                r.raise_for_status()
                if as_json:
                    return await r.json(content_type=None)
                return await r.text()
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Request to {url} timed out after {timeout}s") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

    async def _get_json(
        self,
        url: str,
        timeout: float,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """GETs a JSON document. Transport and HTTP errors raise NetworkError."""
        return await self._get(url, timeout, params, headers, as_json=True)

    async def _get_text(
        self,
        url: str,
        timeout: float,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> str:
        return await self._get(url, timeout, params, headers, as_json=False)
