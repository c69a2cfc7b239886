"""Tests for core.download.models module."""

from pathlib import Path

from core.download.models import DownloadOutcome, DownloadTask
from core.errors.exceptions import DownloadFailedError, DownloadTooLargeError, ErrorCategory


class TestDownloadTask:
    def test_defaults(self):
        task = DownloadTask(url="https://nodejs.org/dist/index.json", destination=Path("/tmp/index.json"))
        assert task.url == "https://nodejs.org/dist/index.json"
        assert task.destination == Path("/tmp/index.json")
        assert task.max_bytes is None
        assert task.timeout == 300
        assert task.sock_read_timeout == 30
        assert task.validate_url is True
        assert task.allowed_domains is None
        assert task.allow_localhost is False

    def test_custom_values(self):
        task = DownloadTask(
            url="https://nodejs.org/dist/index.json",
            destination=Path("/tmp/index.json"),
            max_bytes=1024,
            timeout=120,
            validate_url=False,
            allowed_domains={"nodejs.org"},
        )
        assert task.max_bytes == 1024
        assert task.timeout == 120
        assert task.validate_url is False
        assert task.allowed_domains == {"nodejs.org"}


class TestDownloadOutcome:
    def test_success_outcome(self):
        outcome = DownloadOutcome.success_outcome(
            file_path=Path("/tmp/node.tar.xz"),
            bytes_downloaded=1024,
            content_type="application/x-xz",
            status_code=200,
        )
        assert outcome.success is True
        assert outcome.file_path == Path("/tmp/node.tar.xz")
        assert outcome.bytes_downloaded == 1024
        assert outcome.content_type == "application/x-xz"
        assert outcome.status_code == 200
        assert outcome.error is None
        assert outcome.error_message is None
        assert outcome.error_category is None

    def test_validation_failure(self):
        outcome = DownloadOutcome.validation_failure("https://bad.example/x", "Invalid URL")
        assert outcome.success is False
        assert isinstance(outcome.error, DownloadFailedError)
        assert "URL validation failed: Invalid URL" in outcome.error_message
        assert outcome.error_category == ErrorCategory.PERMANENT
        assert outcome.validation_error == "Invalid URL"
        assert outcome.error.context["url"] == "https://bad.example/x"

    def test_download_failure_keeps_error(self):
        error = DownloadFailedError("https://nodejs.org/x", "HTTP 503", status_code=503)
        outcome = DownloadOutcome.download_failure(error)
        assert outcome.success is False
        assert outcome.error is error
        assert outcome.error_category == ErrorCategory.TRANSIENT
        assert outcome.status_code == 503

    def test_download_failure_no_status_code(self):
        error = DownloadTooLargeError("https://nodejs.org/x", 10, 20)
        outcome = DownloadOutcome.download_failure(error)
        assert outcome.status_code is None
        assert outcome.error_category == ErrorCategory.PERMANENT
