"""
Unified exception hierarchy for the Node.js distribution tooling.

Provides typed exceptions with retry classification. Every error carries a
context dict (URL, file name, expected/actual values) so a caller can log it
verbatim without re-deriving details.
"""

import errno

# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class PipelineError(Exception):
    """
    Base exception for all errors raised or returned by this project.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.UNKNOWN,
        )

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Base Categories
# =============================================================================


class TransientError(PipelineError):
    """Base class for transient errors (a re-run may succeed)."""

    category = ErrorCategory.TRANSIENT


class PermanentError(PipelineError):
    """Base class for permanent errors (a re-run will not help)."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Download Errors
# =============================================================================


class DownloadFailedError(PipelineError):
    """
    Transport or HTTP failure while downloading a file.

    Category follows the HTTP status when there is one (404 is permanent,
    503 is transient) and is TRANSIENT for connection failures and timeouts.
    """

    def __init__(
        self,
        url: str,
        message: str,
        status_code: int | None = None,
        category: ErrorCategory | None = None,
        cause: Exception | None = None,
    ):
        context = {"url": url}
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(f"Download of {url} failed: {message}", cause, context)
        self.url = url
        self.status_code = status_code
        if category is not None:
            self.category = category
        elif status_code is not None:
            self.category = classify_http_status(status_code)
        else:
            self.category = ErrorCategory.TRANSIENT


class DownloadTooLargeError(PermanentError):
    """Response body exceeded the configured byte cap."""

    def __init__(self, url: str, max_bytes: int, received_bytes: int, declared: bool = False):
        source = "declared Content-Length" if declared else "received"
        super().__init__(
            f"Download of {url} exceeds limit of {max_bytes} bytes "
            f"({source} {received_bytes} bytes)",
            context={
                "url": url,
                "max_bytes": max_bytes,
                "received_bytes": received_bytes,
                "declared_length": declared,
            },
        )
        self.url = url
        self.max_bytes = max_bytes
        self.received_bytes = received_bytes


# =============================================================================
# Platform / Verification Errors
# =============================================================================


class UnsupportedPlatformError(PermanentError):
    """Operating system type or architecture has no Node.js distribution mapping."""

    def __init__(self, message: str, os_type=None, architecture=None):
        super().__init__(
            message,
            context={"os_type": str(os_type), "architecture": str(architecture)},
        )
        self.os_type = os_type
        self.architecture = architecture


class ChecksumListMalformedError(PermanentError):
    """Checksum list was unreadable or contained no `<sha256>  <file name>` entries."""

    def __init__(self, message: str, source: str | None = None, cause: Exception | None = None):
        super().__init__(message, cause=cause, context={"source": source} if source else None)
        self.source = source


class FileNameNotInChecksumListError(PermanentError):
    """The file being verified has no entry in the checksum list."""

    def __init__(self, file_name: str, available: list[str] | None = None, source: str | None = None):
        location = f" in {source}" if source else ""
        super().__init__(
            f"Hash for file name {file_name} not found{location}",
            context={
                "file_name": file_name,
                "available_file_names": sorted(available or []),
                "source": source,
            },
        )
        self.file_name = file_name


class HashMismatchError(PermanentError):
    """Computed file hash differs from the expected hash."""

    def __init__(self, file_path: str, expected_hash: str, actual_hash: str, algorithm: str = "sha256"):
        super().__init__(
            f"{algorithm.upper()} hash mismatch for {file_path}: "
            f"expected {expected_hash}, got {actual_hash}",
            context={
                "file_path": file_path,
                "expected_hash": expected_hash,
                "actual_hash": actual_hash,
                "algorithm": algorithm,
            },
        )
        self.file_path = file_path
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash


class SignatureInvalidError(PermanentError):
    """Checksum list signature missing, invalid, or made by an untrusted key."""


class TrustedKeysError(PermanentError):
    """Trusted key list could not be loaded or is empty."""


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code in (408, 429):
        return ErrorCategory.TRANSIENT

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def classify_os_error(error: OSError) -> ErrorCategory:
    """
    Classify OSError by errno into error category.

    Only disk full (ENOSPC), read-only filesystem (EROFS) and permission
    denied (EACCES/EPERM) are PERMANENT.
    """
    permanent_errnos = (errno.ENOSPC, errno.EROFS, errno.EACCES, errno.EPERM)
    return ErrorCategory.PERMANENT if error.errno in permanent_errnos else ErrorCategory.TRANSIENT


def classify_exception(exc: Exception) -> ErrorCategory:
    """Classify an exception into error category."""
    if isinstance(exc, PipelineError):
        return exc.category

    if isinstance(exc, OSError) and exc.errno is not None:
        return classify_os_error(exc)

    exc_type = type(exc).__name__.lower()
    exc_str = str(exc).lower()

    connection_markers = (
        "connectionerror",
        "connection refused",
        "connection reset",
        "name resolution",
        "dns",
        "broken pipe",
    )
    if any(m in exc_type or m in exc_str for m in connection_markers):
        return ErrorCategory.TRANSIENT

    if "timeout" in exc_type or "timeout" in exc_str:
        return ErrorCategory.TRANSIENT

    if "404" in exc_str or "not found" in exc_str or "403" in exc_str:
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN


def wrap_exception(
    exc: Exception,
    default_class: type = PipelineError,
    context: dict | None = None,
) -> PipelineError:
    """Wrap a generic exception in the matching PipelineError subclass."""
    if isinstance(exc, PipelineError):
        if context:
            exc.context.update(context)
        return exc

    category = classify_exception(exc)
    context = context or {}
    context["error_type"] = type(exc).__name__

    if category == ErrorCategory.TRANSIENT:
        return TransientError(str(exc), cause=exc, context=context)
    if category == ErrorCategory.PERMANENT:
        return PermanentError(str(exc), cause=exc, context=context)

    return default_class(str(exc), cause=exc, context=context)
