"""
Downloads a title's content archive from remote storage and unpacks it into
the staging directory.
"""

import asyncio
import logging
import os
import zipfile
from contextlib import suppress
from pathlib import Path
from typing import Callable, Optional

import aiofiles
import aiohttp

from feedtools.api.base import BaseStoreClient
from feedtools.exceptions import ArchiveError

log = logging.getLogger(__name__)

CHUNK_SIZE = 131072  # 128 KB


class ArchiveFetcher(BaseStoreClient):
    """Streams `<app_id>.zip` to disk and extracts it."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(session)
        self.base_url = base_url
        self.timeout = timeout

    def archive_url(self, app_id: int) -> str:
        return f"{self.base_url}{app_id}.zip"

    async def fetch(
        self,
        app_id: int,
        destination_dir: Path,
        log_callback: Optional[Callable[[str], None]] = None,
    ) -> bool:
        """
        Downloads and extracts the archive for an App ID into `destination_dir`.

        Returns:
            True once every entry has been extracted and the archive removed;
            False for a missing archive or any network, I/O or extraction error.
        """

        def emit(message: str) -> None:
            if log_callback:
                log_callback(message)

        emit(f"[2/5] Downloading {app_id}.zip from server storage...")
        zip_path = destination_dir / f"{app_id}.zip"

        try:
            await asyncio.to_thread(destination_dir.mkdir, parents=True, exist_ok=True)
            found = await self._download(app_id, zip_path)
            if not found:
                emit(f"No data found for App ID {app_id}")
                return False

            emit(f"Downloaded: {zip_path.name}")
            emit("Extracting...")
            await asyncio.to_thread(self._extract, zip_path, destination_dir)
            emit("Extracted successfully")

            await asyncio.to_thread(zip_path.unlink)
            return True
        except (
            aiohttp.ClientError,
            asyncio.TimeoutError,
            OSError,
            ArchiveError,
        ) as e:
            log.debug(f"Archive fetch for App ID {app_id} failed: {e}")
            emit(f"Error during download/extraction: {e}")
            return False
        finally:
            with suppress(OSError):
                if zip_path.exists():
                    zip_path.unlink()

    async def _download(self, app_id: int, zip_path: Path) -> bool:
        """Streams the archive to `zip_path`. Returns False on a 404."""
        session = await self._initialize_session()
        url = self.archive_url(app_id)
        log.debug(f"Requesting archive {url}")
        async with session.get(
            url,
            allow_redirects=True,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        ) as response:
            if response.status == 404:
                return False
            response.raise_for_status()

            bytes_downloaded = 0
            async with aiofiles.open(zip_path, "wb") as f:
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    await f.write(chunk)
                    bytes_downloaded += len(chunk)

        log.debug(
            f"Downloaded {bytes_downloaded} bytes to '{os.path.basename(zip_path)}'."
        )
        return True

    @staticmethod
    def _extract(zip_path: Path, destination_dir: Path) -> None:
        try:
            with zipfile.ZipFile(zip_path, "r") as zip_ref:
                zip_ref.extractall(destination_dir)
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"'{zip_path.name}' is not a valid zip archive: {e}") from e
        except (
            NotImplementedError,
            RuntimeError,
            EOFError,
            zipfile.LargeZipFile,
        ) as e:
            # Unsupported compression, encrypted entries or truncated data.
            raise ArchiveError(f"Could not extract '{zip_path.name}': {e}") from e
