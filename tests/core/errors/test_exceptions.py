"""
Tests for exception hierarchy and error classification.
"""

import errno

from core.errors.exceptions import (
    ChecksumListMalformedError,
    DownloadFailedError,
    DownloadTooLargeError,
    ErrorCategory,
    FileNameNotInChecksumListError,
    HashMismatchError,
    PermanentError,
    PipelineError,
    SignatureInvalidError,
    TransientError,
    TrustedKeysError,
    UnsupportedPlatformError,
    classify_exception,
    classify_http_status,
    classify_os_error,
    wrap_exception,
)


class TestErrorCategory:
    """Test ErrorCategory enum."""

    def test_all_categories_exist(self):
        """All expected categories are defined."""
        assert ErrorCategory.TRANSIENT.value == "transient"
        assert ErrorCategory.AUTH.value == "auth"
        assert ErrorCategory.PERMANENT.value == "permanent"
        assert ErrorCategory.UNKNOWN.value == "unknown"


class TestPipelineError:
    """Test base PipelineError class."""

    def test_basic_error(self):
        """Can create basic error with message."""
        err = PipelineError("Something went wrong")
        assert err.message == "Something went wrong"
        assert err.cause is None
        assert err.context == {}
        assert err.category == ErrorCategory.UNKNOWN
        assert err.is_retryable

    def test_error_with_cause(self):
        """Can wrap another exception."""
        cause = ValueError("Invalid value")
        err = PipelineError("Wrapper message", cause=cause)
        assert err.cause == cause
        assert "Caused by: Invalid value" in str(err)

    def test_error_with_context(self):
        err = PipelineError("Failed", context={"url": "https://nodejs.org/x"})
        assert err.context["url"] == "https://nodejs.org/x"


class TestBaseCategories:
    def test_categories(self):
        assert TransientError("x").category == ErrorCategory.TRANSIENT
        assert PermanentError("x").category == ErrorCategory.PERMANENT

    def test_retryable(self):
        assert TransientError("x").is_retryable
        assert not PermanentError("x").is_retryable


class TestDownloadErrors:
    def test_download_failed_category_from_status(self):
        assert DownloadFailedError("u", "HTTP 404", status_code=404).category == ErrorCategory.PERMANENT
        assert DownloadFailedError("u", "HTTP 503", status_code=503).category == ErrorCategory.TRANSIENT
        assert DownloadFailedError("u", "HTTP 401", status_code=401).category == ErrorCategory.AUTH

    def test_download_failed_without_status_is_transient(self):
        err = DownloadFailedError("https://nodejs.org/x", "connection error")
        assert err.category == ErrorCategory.TRANSIENT
        assert err.status_code is None
        assert err.context == {"url": "https://nodejs.org/x"}

    def test_download_failed_explicit_category(self):
        err = DownloadFailedError("u", "bad url", category=ErrorCategory.PERMANENT)
        assert err.category == ErrorCategory.PERMANENT

    def test_download_failed_category_is_per_instance(self):
        DownloadFailedError("u", "HTTP 404", status_code=404)
        assert DownloadFailedError("u", "reset").category == ErrorCategory.TRANSIENT

    def test_download_too_large(self):
        err = DownloadTooLargeError("https://nodejs.org/x", 10, 20, declared=True)
        assert isinstance(err, PermanentError)
        assert err.max_bytes == 10
        assert err.received_bytes == 20
        assert "declared Content-Length" in str(err)
        assert err.context["max_bytes"] == 10
        assert err.context["url"] == "https://nodejs.org/x"


class TestVerificationErrors:
    def test_all_permanent(self):
        errors = [
            UnsupportedPlatformError("nope"),
            ChecksumListMalformedError("empty"),
            FileNameNotInChecksumListError("node.tar.xz"),
            HashMismatchError("/tmp/f", "aa", "bb"),
            SignatureInvalidError("bad"),
            TrustedKeysError("none"),
        ]
        for err in errors:
            assert isinstance(err, PermanentError)
            assert not err.is_retryable

    def test_file_name_not_in_checksum_list(self):
        err = FileNameNotInChecksumListError(
            "node-v20.9.0-linux-x64.tar.xz",
            available=["b.tar.xz", "a.7z"],
            source="SHASUMS256.txt.asc",
        )
        assert "node-v20.9.0-linux-x64.tar.xz" in str(err)
        assert err.file_name == "node-v20.9.0-linux-x64.tar.xz"
        assert err.context["available_file_names"] == ["a.7z", "b.tar.xz"]

    def test_hash_mismatch_context(self):
        err = HashMismatchError("/tmp/node.tar.xz", "a" * 64, "b" * 64)
        assert err.expected_hash == "a" * 64
        assert err.actual_hash == "b" * 64
        assert err.context["file_path"] == "/tmp/node.tar.xz"
        assert "SHA256 hash mismatch" in str(err)

    def test_unsupported_platform_context(self):
        err = UnsupportedPlatformError("nope", os_type="freebsd", architecture="riscv64")
        assert err.context == {"os_type": "freebsd", "architecture": "riscv64"}


class TestClassifyHttpStatus:
    def test_status_mapping(self):
        assert classify_http_status(200) == ErrorCategory.UNKNOWN
        assert classify_http_status(401) == ErrorCategory.AUTH
        assert classify_http_status(403) == ErrorCategory.PERMANENT
        assert classify_http_status(404) == ErrorCategory.PERMANENT
        assert classify_http_status(408) == ErrorCategory.TRANSIENT
        assert classify_http_status(429) == ErrorCategory.TRANSIENT
        assert classify_http_status(500) == ErrorCategory.TRANSIENT
        assert classify_http_status(503) == ErrorCategory.TRANSIENT


class TestClassifyOsError:
    def test_disk_full_is_permanent(self):
        assert classify_os_error(OSError(errno.ENOSPC, "full")) == ErrorCategory.PERMANENT

    def test_permission_denied_is_permanent(self):
        assert classify_os_error(OSError(errno.EACCES, "denied")) == ErrorCategory.PERMANENT

    def test_other_is_transient(self):
        assert classify_os_error(OSError(errno.EIO, "io")) == ErrorCategory.TRANSIENT


class TestClassifyException:
    def test_pipeline_error_uses_category(self):
        assert classify_exception(PermanentError("x")) == ErrorCategory.PERMANENT

    def test_connection_markers(self):
        assert classify_exception(Exception("Connection refused")) == ErrorCategory.TRANSIENT

    def test_timeout(self):
        assert classify_exception(Exception("read timeout")) == ErrorCategory.TRANSIENT

    def test_not_found(self):
        assert classify_exception(Exception("404 not found")) == ErrorCategory.PERMANENT

    def test_unknown(self):
        assert classify_exception(Exception("weird")) == ErrorCategory.UNKNOWN


class TestWrapException:
    def test_pipeline_error_returned_with_context(self):
        err = PermanentError("x")
        wrapped = wrap_exception(err, context={"file_path": "/tmp/f"})
        assert wrapped is err
        assert err.context["file_path"] == "/tmp/f"

    def test_os_error_wrapped_by_category(self):
        cause = OSError(errno.EACCES, "Permission denied")
        wrapped = wrap_exception(cause, context={"output_directory": "/out"})
        assert isinstance(wrapped, PermanentError)
        assert wrapped.cause is cause
        assert wrapped.context["error_type"] == "OSError"
        assert wrapped.context["output_directory"] == "/out"

    def test_unknown_uses_default_class(self):
        wrapped = wrap_exception(Exception("weird"))
        assert type(wrapped) is PipelineError
