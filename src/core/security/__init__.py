"""
Security validation module.

Provides input validation for security-sensitive operations:
    - validate_download_url(): HTTPS + domain allowlist for download sources
"""

from core.security.exceptions import URLValidationError, ValidationError
from core.security.url_validation import (
    ALLOWED_SCHEMES,
    BLOCKED_HOSTS,
    DEFAULT_ALLOWED_DOMAINS,
    PRIVATE_RANGES,
    get_allowed_domains,
    is_private_ip,
    validate_download_url,
)

__all__ = [
    "validate_download_url",
    "get_allowed_domains",
    "is_private_ip",
    "ALLOWED_SCHEMES",
    "BLOCKED_HOSTS",
    "DEFAULT_ALLOWED_DOMAINS",
    "PRIVATE_RANGES",
    "ValidationError",
    "URLValidationError",
]
