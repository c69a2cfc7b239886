"""
Bounded streaming download to disk.

Streams a response body to a temporary file next to the destination,
enforcing a byte cap while reading, and renames the file into place only
after the whole body has been received. Failures are returned as typed
error values rather than raised.
"""

import asyncio
import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional

import aiohttp

from core.errors.exceptions import (
    DownloadFailedError,
    DownloadTooLargeError,
    ErrorCategory,
    classify_os_error,
)

# Download configuration constants
CHUNK_SIZE = 1024 * 1024  # 1MB chunks for streaming
TEMP_SUFFIX = ".part"


@dataclass
class StreamDownloadResponse:
    """
    Response from streaming HTTP download operation.

    Attributes:
        status_code: HTTP status code
        content_length: Size in bytes (from Content-Length header)
        content_type: MIME type (from Content-Type header)
        chunk_iterator: Async iterator yielding byte chunks
        release: Coroutine function releasing the HTTP response; safe to call
            more than once and also called when chunk_iterator finishes
    """

    status_code: int
    content_length: Optional[int]
    content_type: Optional[str]
    chunk_iterator: AsyncIterator[bytes]
    release: Callable[[], Awaitable[None]]

    async def aclose(self) -> None:
        """Stop iteration and release the underlying connection."""
        await self.chunk_iterator.aclose()
        await self.release()


@dataclass
class DownloadToFileResult:
    """
    Result from download_to_file operation.

    Attributes:
        file_path: Final location of the downloaded file
        bytes_written: Number of bytes written to file
        content_type: MIME type from Content-Type header
        status_code: HTTP status code of the response
    """

    file_path: Path
    bytes_written: int
    content_type: Optional[str]
    status_code: int


async def stream_download_url(
    url: str,
    session: aiohttp.ClientSession,
    timeout: int = 300,
    chunk_size: int = CHUNK_SIZE,
    allow_redirects: bool = True,
    sock_read_timeout: int = 30,
) -> tuple[Optional[StreamDownloadResponse], Optional[DownloadFailedError]]:
    """
    Open a streaming GET request and return an async chunk iterator.

    The iterator MUST be consumed or closed (StreamDownloadResponse.aclose)
    by the caller so the connection is released.

    Does NOT perform:
    - URL validation (caller's responsibility)
    - Retry logic (a failed download fails the run)
    - Size enforcement (see download_to_file)

    Args:
        url: URL to download
        session: aiohttp ClientSession (caller manages lifecycle)
        timeout: Total timeout in seconds
        chunk_size: Size of chunks in bytes
        allow_redirects: Whether to follow redirects
        sock_read_timeout: Timeout for individual socket reads in seconds.
            Prevents hanging on stalled connections where the server stops
            sending data but keeps the connection open.

    Returns:
        Tuple of (StreamDownloadResponse, None) on success
        or (None, DownloadFailedError) on failure
    """
    try:
        response_ctx = session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout, sock_read=sock_read_timeout),
            allow_redirects=allow_redirects,
        )
        response = await response_ctx.__aenter__()
    except asyncio.TimeoutError as e:
        return None, DownloadFailedError(
            url,
            f"timeout after {timeout}s",
            category=ErrorCategory.TRANSIENT,
            cause=e,
        )
    except aiohttp.ClientError as e:
        # Connection errors, DNS failures, TLS failures, etc.
        return None, DownloadFailedError(
            url,
            f"connection error: {e}",
            category=ErrorCategory.TRANSIENT,
            cause=e,
        )

    released = False

    async def release() -> None:
        nonlocal released
        if released:
            return
        released = True
        await response_ctx.__aexit__(None, None, None)

    if not 200 <= response.status < 300:
        await release()
        return None, DownloadFailedError(
            url,
            f"HTTP {response.status}",
            status_code=response.status,
        )

    async def chunk_iterator() -> AsyncIterator[bytes]:
        try:
            async for chunk in response.content.iter_chunked(chunk_size):
                yield chunk
        finally:
            await release()

    return (
        StreamDownloadResponse(
            status_code=response.status,
            content_length=response.content_length,
            content_type=response.headers.get("Content-Type"),
            chunk_iterator=chunk_iterator(),
            release=release,
        ),
        None,
    )


def temporary_path_for(output_path: Path) -> Path:
    """Hidden, uniquely named sibling of output_path used while downloading."""
    return output_path.with_name(f".{output_path.name}.{secrets.token_hex(4)}{TEMP_SUFFIX}")


async def download_to_file(
    url: str,
    output_path: Path,
    session: aiohttp.ClientSession,
    max_bytes: Optional[int] = None,
    timeout: int = 300,
    chunk_size: int = CHUNK_SIZE,
    sock_read_timeout: int = 30,
) -> tuple[
    Optional[DownloadToFileResult],
    Optional[DownloadFailedError | DownloadTooLargeError],
]:
    """
    Download URL content to a file with a byte cap.

    The declared Content-Length is checked first, and the running byte count
    is checked after every chunk, so a server that misreports (or omits) the
    length cannot push more than max_bytes to disk. The body goes to a
    temporary sibling file that is renamed onto output_path on success and
    removed on any failure or cancellation; output_path is never left
    half-written.

    Args:
        url: URL to download
        output_path: Path where file will be saved (created or overwritten)
        session: aiohttp ClientSession (caller manages lifecycle)
        max_bytes: Maximum accepted body size in bytes (None = unbounded)
        timeout: Total timeout in seconds
        chunk_size: Size of chunks in bytes
        sock_read_timeout: Timeout for individual socket reads in seconds

    Returns:
        Tuple of (DownloadToFileResult, None) on success
        or (None, DownloadFailedError | DownloadTooLargeError) on failure

    Example:
        async with create_session() as session:
            result, error = await download_to_file(
                "https://nodejs.org/dist/v20.9.0/SHASUMS256.txt.asc",
                Path("SHASUMS256.txt.asc"),
                session,
                max_bytes=100_000,
            )
            if error:
                print(f"Download failed: {error}")
            else:
                print(f"Downloaded {result.bytes_written} bytes")
    """
    output_path = Path(output_path)

    response, error = await stream_download_url(
        url=url,
        session=session,
        timeout=timeout,
        chunk_size=chunk_size,
        sock_read_timeout=sock_read_timeout,
    )

    if error:
        return None, error

    if (
        max_bytes is not None
        and response.content_length is not None
        and response.content_length > max_bytes
    ):
        await response.aclose()
        return None, DownloadTooLargeError(
            url, max_bytes, response.content_length, declared=True
        )

    temp_path = temporary_path_for(output_path)
    completed = False

    try:
        bytes_written = 0
        await asyncio.to_thread(output_path.parent.mkdir, parents=True, exist_ok=True)
        with open(temp_path, "wb") as f:
            async for chunk in response.chunk_iterator:
                bytes_written += len(chunk)
                if max_bytes is not None and bytes_written > max_bytes:
                    return None, DownloadTooLargeError(url, max_bytes, bytes_written)
                # Use asyncio.to_thread for disk I/O to avoid blocking event loop
                await asyncio.to_thread(f.write, chunk)

        await asyncio.to_thread(os.replace, temp_path, output_path)
        completed = True

        return DownloadToFileResult(
            file_path=output_path,
            bytes_written=bytes_written,
            content_type=response.content_type,
            status_code=response.status_code,
        ), None

    # TimeoutError and aiohttp.ClientOSError are OSError subclasses, so the
    # transport handlers must come before the file I/O handler.
    except asyncio.TimeoutError as e:
        return None, DownloadFailedError(
            url,
            f"timeout after {timeout}s while reading body",
            category=ErrorCategory.TRANSIENT,
            cause=e,
        )
    except aiohttp.ClientError as e:
        return None, DownloadFailedError(
            url,
            f"connection error while reading body: {e}",
            category=ErrorCategory.TRANSIENT,
            cause=e,
        )
    except OSError as e:
        return None, DownloadFailedError(
            url,
            f"file write error: {e}",
            category=classify_os_error(e),
            cause=e,
        )
    finally:
        # Release the HTTP connection on every exit path, including cancellation
        await response.aclose()
        if not completed:
            temp_path.unlink(missing_ok=True)


__all__ = [
    "CHUNK_SIZE",
    "TEMP_SUFFIX",
    "StreamDownloadResponse",
    "DownloadToFileResult",
    "stream_download_url",
    "download_to_file",
    "temporary_path_for",
]
