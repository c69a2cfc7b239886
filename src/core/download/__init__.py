"""
Async bounded download module with clean interface.

Provides:
    - BoundedDownloader: High-level interface (DownloadTask -> DownloadOutcome)
    - Streaming HTTP download with aiohttp and a byte cap
    - Atomic rename of completed downloads (no partial files left behind)
    - URL validation against a domain allowlist

Components:
    - downloader: BoundedDownloader class
    - models: DownloadTask and DownloadOutcome data models
    - http_client: aiohttp session factory
    - streaming: Low-level streaming download to file

Example usage:
    from core.download import BoundedDownloader, DownloadTask

    async with BoundedDownloader() as downloader:
        task = DownloadTask(
            url="https://nodejs.org/dist/v20.9.0/SHASUMS256.txt.asc",
            destination=Path("SHASUMS256.txt.asc"),
            max_bytes=100_000,
        )
        outcome = await downloader.download(task)

    if outcome.success:
        print(f"Downloaded {outcome.bytes_downloaded} bytes")
    else:
        print(f"Failed: {outcome.error_message}")
"""

from core.download.downloader import BoundedDownloader
from core.download.http_client import create_session
from core.download.models import DownloadOutcome, DownloadTask
from core.download.streaming import (
    CHUNK_SIZE,
    DownloadToFileResult,
    StreamDownloadResponse,
    download_to_file,
    stream_download_url,
)

__all__ = [
    # High-level interface
    "BoundedDownloader",
    "DownloadTask",
    "DownloadOutcome",
    # HTTP client
    "create_session",
    # Streaming
    "stream_download_url",
    "download_to_file",
    "StreamDownloadResponse",
    "DownloadToFileResult",
    "CHUNK_SIZE",
]
