"""
Data models for bounded download operations.

Defines clean input/output models for the BoundedDownloader interface:
- DownloadTask: Input specification for what to download
- DownloadOutcome: Result of download operation with metadata
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Set

from core.errors.exceptions import DownloadFailedError, ErrorCategory, PipelineError


@dataclass
class DownloadTask:
    """
    Input specification for a bounded download.

    Attributes:
        url: URL to download from
        destination: Path where file should be saved (created or overwritten)
        max_bytes: Maximum accepted body size in bytes (None = no limit)
        timeout: Total timeout in seconds (default: 300)
        sock_read_timeout: Stall timeout between socket reads (default: 30)
        validate_url: Whether to validate URL against domain allowlist (default: True)
        allowed_domains: Optional custom domain allowlist (None = use defaults)
        allow_localhost: Accept http(s)://localhost URLs (local mirrors)
    """

    url: str
    destination: Path
    max_bytes: Optional[int] = None
    timeout: int = 300
    sock_read_timeout: int = 30
    validate_url: bool = True
    allowed_domains: Optional[Set[str]] = None
    allow_localhost: bool = False


@dataclass
class DownloadOutcome:
    """
    Result of a bounded download.

    Success case:
        success=True, file_path set, error None

    Failure case:
        success=False, error set (DownloadFailedError, DownloadTooLargeError
        or a URL validation failure), file_path None

    Attributes:
        success: Whether download succeeded
        file_path: Path to downloaded file (None on failure)
        bytes_downloaded: Number of bytes written to disk
        content_type: MIME type from Content-Type header
        status_code: HTTP status code (None for connection errors)
        error: Typed error describing the failure (None on success)
        validation_error: Specific validation failure message (None if no validation error)
    """

    success: bool
    file_path: Optional[Path] = None
    bytes_downloaded: int = 0
    content_type: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[PipelineError] = None
    validation_error: Optional[str] = None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error else None

    @property
    def error_category(self) -> Optional[ErrorCategory]:
        return self.error.category if self.error else None

    @classmethod
    def success_outcome(
        cls,
        file_path: Path,
        bytes_downloaded: int,
        content_type: Optional[str],
        status_code: int,
    ) -> "DownloadOutcome":
        """Create successful download outcome."""
        return cls(
            success=True,
            file_path=file_path,
            bytes_downloaded=bytes_downloaded,
            content_type=content_type,
            status_code=status_code,
        )

    @classmethod
    def validation_failure(cls, url: str, validation_error: str) -> "DownloadOutcome":
        """
        Create validation failure outcome.

        Used when the URL is rejected before any request is made.

        Args:
            url: Rejected URL
            validation_error: Specific validation error message

        Returns:
            DownloadOutcome with success=False and validation_error set
        """
        return cls(
            success=False,
            error=DownloadFailedError(
                url,
                f"URL validation failed: {validation_error}",
                category=ErrorCategory.PERMANENT,
            ),
            validation_error=validation_error,
        )

    @classmethod
    def download_failure(cls, error: PipelineError) -> "DownloadOutcome":
        """
        Create download failure outcome.

        Used for HTTP errors, timeouts, connection failures and size cap
        violations. The error is kept unchanged so callers can surface it.
        """
        return cls(
            success=False,
            error=error,
            status_code=getattr(error, "status_code", None),
        )


__all__ = ["DownloadTask", "DownloadOutcome"]
