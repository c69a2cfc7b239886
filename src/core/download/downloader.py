"""
Bounded downloader with clean interface.

Provides BoundedDownloader class that orchestrates:
- URL validation (HTTPS + domain allowlist)
- Streaming HTTP download with a byte cap
- Atomic placement of the finished file
- Error reporting as typed outcome values

Clean interface: DownloadTask -> DownloadOutcome
"""

import asyncio
import logging
import time

import aiohttp

from core.download.http_client import create_session
from core.download.models import DownloadOutcome, DownloadTask
from core.download.streaming import CHUNK_SIZE, download_to_file
from core.security.exceptions import URLValidationError
from core.security.url_validation import validate_download_url

logger = logging.getLogger(__name__)


class BoundedDownloader:
    """
    Downloader that never writes more than a task's max_bytes to disk.

    Owns its aiohttp session unless one is injected; use it as an async
    context manager (or call aclose()) so the session is always released.
    A single instance can serve several downloads within one run.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        chunk_size: int = CHUNK_SIZE,
        max_connections: int = 10,
        max_connections_per_host: int = 4,
    ):
        self._session = session
        self._owns_session = session is None
        self._chunk_size = chunk_size
        self._max_connections = max_connections
        self._max_connections_per_host = max_connections_per_host

    async def __aenter__(self) -> "BoundedDownloader":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = create_session(
                max_connections=self._max_connections,
                max_connections_per_host=self._max_connections_per_host,
            )
        return self._session

    async def aclose(self) -> None:
        """Close the session if this downloader created it."""
        if self._owns_session and self._session is not None:
            session, self._session = self._session, None
            await session.close()
            # Let the connector finish closing transports
            await asyncio.sleep(0)

    async def download(self, task: DownloadTask) -> DownloadOutcome:
        """Download task.url to task.destination, bounded by task.max_bytes."""
        if task.validate_url:
            try:
                validate_download_url(
                    task.url,
                    allowed_domains=task.allowed_domains,
                    allow_localhost=task.allow_localhost,
                )
            except URLValidationError as e:
                return DownloadOutcome.validation_failure(task.url, str(e))

        logger.info(
            f"Downloading {task.url}",
            extra={
                "download_url": task.url,
                "destination_path": str(task.destination),
                "max_bytes": task.max_bytes,
            },
        )

        t_dl = time.perf_counter()
        result, error = await download_to_file(
            url=task.url,
            output_path=task.destination,
            session=self._get_session(),
            max_bytes=task.max_bytes,
            timeout=task.timeout,
            chunk_size=self._chunk_size,
            sock_read_timeout=task.sock_read_timeout,
        )
        dl_ms = int((time.perf_counter() - t_dl) * 1000)

        if error:
            logger.debug(
                f"Download failed after {dl_ms}ms: {error}",
                extra={
                    "download_url": task.url,
                    "duration_ms": dl_ms,
                    "error_category": error.category.value,
                },
            )
            return DownloadOutcome.download_failure(error)

        logger.info(
            f"Downloaded {result.bytes_written} bytes to {result.file_path} in {dl_ms}ms",
            extra={
                "download_url": task.url,
                "bytes_downloaded": result.bytes_written,
                "duration_ms": dl_ms,
                "content_type": result.content_type,
            },
        )

        return DownloadOutcome.success_outcome(
            file_path=result.file_path,
            bytes_downloaded=result.bytes_written,
            content_type=result.content_type,
            status_code=result.status_code,
        )


__all__ = ["BoundedDownloader"]
