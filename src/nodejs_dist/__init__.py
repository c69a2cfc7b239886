"""
Node.js binary distribution download and verification.

Resolves the release archive for an operating system / architecture,
downloads it together with the signed SHASUMS256.txt.asc, checks the
checksum list signature against the Node.js release signing keys and the
archive's SHA-256 against the list.

Example:
    from nodejs_dist import OperatingSystem, download_and_verify

    outcome = download_and_verify(
        OperatingSystem.parse("linux", "x64"), "20.9.0", Path("build/nodejs")
    )
"""

from nodejs_dist.keys import TrustedKeySet, load_trusted_keys
from nodejs_dist.operating_system import Architecture, OperatingSystem, OsType
from nodejs_dist.paths import NodeJsPaths, resolve_nodejs_paths
from nodejs_dist.shasums import load_shasums_file, parse_shasums
from nodejs_dist.signature import (
    SignatureVerification,
    SignatureVerifier,
    verify_file_hash,
    verify_hash,
)
from nodejs_dist.task import (
    NodeJsArchiveDownloader,
    NodeJsDownloadOutcome,
    RunState,
    download_and_verify,
    downloaded_file_path,
)

__all__ = [
    # Platform
    "OsType",
    "Architecture",
    "OperatingSystem",
    # Paths
    "NodeJsPaths",
    "resolve_nodejs_paths",
    # Checksums
    "parse_shasums",
    "load_shasums_file",
    # Signatures
    "TrustedKeySet",
    "load_trusted_keys",
    "SignatureVerifier",
    "SignatureVerification",
    "verify_hash",
    "verify_file_hash",
    # Task
    "RunState",
    "NodeJsDownloadOutcome",
    "NodeJsArchiveDownloader",
    "download_and_verify",
    "downloaded_file_path",
]
