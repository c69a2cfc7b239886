"""
Core types shared across modules.

Base enums used by the error hierarchy and the download layer so that every
module compares against the same enum class.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    The download-and-verify task never retries on its own. The category tells
    a calling build step whether re-running the whole task can help.

    Categories:
        TRANSIENT: Temporary failures where a re-run may succeed
                   (e.g., network timeouts, 429/503 responses)
        AUTH: Authentication failures (401, login redirects)
        PERMANENT: Failures a re-run will not fix
                   (e.g., 404, hash mismatch, bad signature, unsupported platform)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


__all__ = [
    "ErrorCategory",
]
