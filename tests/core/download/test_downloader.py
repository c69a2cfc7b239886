"""
Tests for BoundedDownloader with DownloadTask/DownloadOutcome interface.

Test coverage:
- Successful downloads
- URL validation (domain allowlist, HTTPS)
- HTTP errors, timeouts and size cap violations as outcome values
- Session management (owned vs injected)
"""

from unittest.mock import AsyncMock, Mock, patch

import aiohttp
import pytest

from core.download.downloader import BoundedDownloader
from core.download.models import DownloadTask
from core.download.streaming import DownloadToFileResult
from core.errors.exceptions import (
    DownloadFailedError,
    DownloadTooLargeError,
    ErrorCategory,
)

URL = "https://nodejs.org/dist/v20.9.0/SHASUMS256.txt.asc"


@pytest.fixture
def temp_output_dir(tmp_path):
    """Create temporary output directory for downloads."""
    output_dir = tmp_path / "downloads"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def sample_task(temp_output_dir):
    """Create sample download task."""
    return DownloadTask(
        url=URL,
        destination=temp_output_dir / "SHASUMS256.txt.asc",
        max_bytes=100_000,
        timeout=30,
    )


@pytest.fixture
def mock_session():
    session = Mock(spec=aiohttp.ClientSession)
    session.close = AsyncMock()
    return session


class TestBoundedDownloaderSuccess:
    """Test successful download scenarios."""

    @pytest.mark.asyncio
    async def test_download_success(self, sample_task, mock_session):
        result = DownloadToFileResult(
            file_path=sample_task.destination,
            bytes_written=1234,
            content_type="text/plain",
            status_code=200,
        )

        with patch("core.download.downloader.download_to_file") as mock_download:
            mock_download.return_value = (result, None)

            downloader = BoundedDownloader(session=mock_session)
            outcome = await downloader.download(sample_task)

        assert outcome.success is True
        assert outcome.file_path == sample_task.destination
        assert outcome.bytes_downloaded == 1234
        assert outcome.content_type == "text/plain"
        assert outcome.status_code == 200
        assert outcome.error is None
        assert outcome.error_message is None
        assert outcome.error_category is None

    @pytest.mark.asyncio
    async def test_task_settings_passed_to_download(self, sample_task, mock_session):
        with patch("core.download.downloader.download_to_file") as mock_download:
            mock_download.return_value = (
                DownloadToFileResult(sample_task.destination, 1, None, 200),
                None,
            )

            downloader = BoundedDownloader(session=mock_session, chunk_size=4096)
            await downloader.download(sample_task)

        kwargs = mock_download.call_args.kwargs
        assert kwargs["url"] == URL
        assert kwargs["output_path"] == sample_task.destination
        assert kwargs["session"] is mock_session
        assert kwargs["max_bytes"] == 100_000
        assert kwargs["timeout"] == 30
        assert kwargs["chunk_size"] == 4096


class TestBoundedDownloaderValidation:
    """Test URL validation before any request is made."""

    @pytest.mark.asyncio
    async def test_domain_not_in_allowlist(self, temp_output_dir, mock_session):
        task = DownloadTask(
            url="https://evil.example.com/node.tar.xz",
            destination=temp_output_dir / "node.tar.xz",
        )

        with patch("core.download.downloader.download_to_file") as mock_download:
            downloader = BoundedDownloader(session=mock_session)
            outcome = await downloader.download(task)

        assert outcome.success is False
        assert "Domain not in allowlist" in outcome.validation_error
        assert isinstance(outcome.error, DownloadFailedError)
        assert outcome.error_category == ErrorCategory.PERMANENT
        mock_download.assert_not_called()

    @pytest.mark.asyncio
    async def test_http_scheme_rejected(self, temp_output_dir, mock_session):
        task = DownloadTask(
            url="http://nodejs.org/dist/v20.9.0/SHASUMS256.txt.asc",
            destination=temp_output_dir / "SHASUMS256.txt.asc",
        )

        downloader = BoundedDownloader(session=mock_session)
        outcome = await downloader.download(task)

        assert outcome.success is False
        assert "Must be HTTPS" in outcome.validation_error

    @pytest.mark.asyncio
    async def test_custom_allowlist(self, temp_output_dir, mock_session):
        task = DownloadTask(
            url="https://mirror.example.com/dist/v20.9.0/SHASUMS256.txt.asc",
            destination=temp_output_dir / "SHASUMS256.txt.asc",
            allowed_domains={"mirror.example.com"},
        )

        with patch("core.download.downloader.download_to_file") as mock_download:
            mock_download.return_value = (
                DownloadToFileResult(task.destination, 10, None, 200),
                None,
            )
            downloader = BoundedDownloader(session=mock_session)
            outcome = await downloader.download(task)

        assert outcome.success is True

    @pytest.mark.asyncio
    async def test_validation_can_be_disabled(self, temp_output_dir, mock_session):
        task = DownloadTask(
            url="http://127.0.0.1:8080/node.tar.xz",
            destination=temp_output_dir / "node.tar.xz",
            validate_url=False,
        )

        with patch("core.download.downloader.download_to_file") as mock_download:
            mock_download.return_value = (
                DownloadToFileResult(task.destination, 10, None, 200),
                None,
            )
            downloader = BoundedDownloader(session=mock_session)
            outcome = await downloader.download(task)

        assert outcome.success is True


class TestBoundedDownloaderErrors:
    """Test failures returned as outcome values."""

    @pytest.mark.asyncio
    async def test_http_404(self, sample_task, mock_session):
        error = DownloadFailedError(URL, "HTTP 404", status_code=404)

        with patch("core.download.downloader.download_to_file") as mock_download:
            mock_download.return_value = (None, error)
            downloader = BoundedDownloader(session=mock_session)
            outcome = await downloader.download(sample_task)

        assert outcome.success is False
        assert outcome.error is error
        assert outcome.status_code == 404
        assert outcome.error_category == ErrorCategory.PERMANENT
        assert "HTTP 404" in outcome.error_message

    @pytest.mark.asyncio
    async def test_size_cap_violation(self, sample_task, mock_session):
        error = DownloadTooLargeError(URL, 100_000, 150_000, declared=True)

        with patch("core.download.downloader.download_to_file") as mock_download:
            mock_download.return_value = (None, error)
            downloader = BoundedDownloader(session=mock_session)
            outcome = await downloader.download(sample_task)

        assert outcome.success is False
        assert outcome.error is error
        assert outcome.status_code is None
        assert outcome.file_path is None

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self, sample_task, mock_session):
        error = DownloadFailedError(URL, "timeout after 30s", category=ErrorCategory.TRANSIENT)

        with patch("core.download.downloader.download_to_file") as mock_download:
            mock_download.return_value = (None, error)
            downloader = BoundedDownloader(session=mock_session)
            outcome = await downloader.download(sample_task)

        assert outcome.error_category == ErrorCategory.TRANSIENT
        assert outcome.error.is_retryable


class TestBoundedDownloaderSession:
    """Test session ownership."""

    @pytest.mark.asyncio
    async def test_creates_and_closes_own_session(self, sample_task, mock_session):
        with patch("core.download.downloader.download_to_file") as mock_download, patch(
            "core.download.downloader.create_session"
        ) as mock_create:
            mock_create.return_value = mock_session
            mock_download.return_value = (
                DownloadToFileResult(sample_task.destination, 1, None, 200),
                None,
            )

            async with BoundedDownloader() as downloader:
                await downloader.download(sample_task)
                await downloader.download(sample_task)

        mock_create.assert_called_once()
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self, sample_task, mock_session):
        with patch("core.download.downloader.download_to_file") as mock_download:
            mock_download.return_value = (
                DownloadToFileResult(sample_task.destination, 1, None, 200),
                None,
            )

            async with BoundedDownloader(session=mock_session) as downloader:
                await downloader.download(sample_task)

        mock_session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_aclose_without_session_is_noop(self):
        with patch("core.download.downloader.create_session") as mock_create:
            downloader = BoundedDownloader()
            await downloader.aclose()

        mock_create.assert_not_called()
