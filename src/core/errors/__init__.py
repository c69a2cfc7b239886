"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- PipelineError hierarchy for typed exceptions
- Download and verification error taxonomy
- Classification utilities for error handling
"""

from core.errors.exceptions import (
    ChecksumListMalformedError,
    DownloadFailedError,
    DownloadTooLargeError,
    # Enums
    ErrorCategory,
    FileNameNotInChecksumListError,
    HashMismatchError,
    PermanentError,
    # Base classes
    PipelineError,
    SignatureInvalidError,
    TransientError,
    TrustedKeysError,
    UnsupportedPlatformError,
    # Classification utilities
    classify_exception,
    classify_http_status,
    classify_os_error,
    wrap_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "PipelineError",
    "TransientError",
    "PermanentError",
    # Download errors
    "DownloadFailedError",
    "DownloadTooLargeError",
    # Platform / verification errors
    "UnsupportedPlatformError",
    "ChecksumListMalformedError",
    "FileNameNotInChecksumListError",
    "HashMismatchError",
    "SignatureInvalidError",
    "TrustedKeysError",
    # Classification utilities
    "classify_http_status",
    "classify_os_error",
    "classify_exception",
    "wrap_exception",
]
