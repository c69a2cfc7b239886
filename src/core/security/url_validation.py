"""
URL validation for distribution downloads.

Enforces HTTPS and a domain allowlist so that a misconfigured mirror URL
cannot point the downloader at an arbitrary or internal host.
"""

import ipaddress
import os
from typing import Optional, Set
from urllib.parse import urlparse

from core.security.exceptions import URLValidationError

ALLOWED_SCHEMES: Set[str] = {"https", "http"}

# Official distribution host; mirrors are added through configuration
DEFAULT_ALLOWED_DOMAINS: Set[str] = {
    "nodejs.org",
}

LOCALHOST_NAMES: Set[str] = {"localhost", "127.0.0.1", "::1"}

# Hosts to block (metadata endpoints)
BLOCKED_HOSTS: Set[str] = {
    "0.0.0.0",
    "metadata.google.internal",
    "metadata.aws.internal",
    "169.254.169.254",
}

PRIVATE_RANGES = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("169.254.0.0/16"),  # Link-local (cloud metadata)
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fe80::/10"),
    ipaddress.ip_network("fc00::/7"),
]


def get_allowed_domains() -> Set[str]:
    """
    Get allowed download domains.

    Reads from NODEJS_DIST_ALLOWED_DOMAINS env var (comma-separated)
    or falls back to DEFAULT_ALLOWED_DOMAINS.
    """
    env_domains = os.getenv("NODEJS_DIST_ALLOWED_DOMAINS", "")
    if env_domains:
        return {d.strip().lower() for d in env_domains.split(",") if d.strip()}
    return DEFAULT_ALLOWED_DOMAINS


def validate_download_url(
    url: str,
    allowed_domains: Optional[Set[str]] = None,
    allow_localhost: bool = False,
) -> None:
    """
    Validate a download URL against the domain allowlist.

    Rules:
    - HTTPS required, except for localhost when allow_localhost=True
      (a local mirror used in development)
    - Hostname must be present and in the allowlist (case-insensitive)
    - Metadata endpoints and private IP literals are always rejected
    - Embedded credentials (user:pass@host) are rejected

    Args:
        url: URL to validate
        allowed_domains: Set of allowed domain names (None = use default allowlist)
        allow_localhost: Accept http(s)://localhost URLs

    Raises:
        URLValidationError: If the URL fails any rule

    Examples:
        >>> validate_download_url("https://nodejs.org/dist/v20.9.0/SHASUMS256.txt.asc")

        >>> validate_download_url("http://nodejs.org/dist/")
        Traceback (most recent call last):
        URLValidationError: Must be HTTPS, got http
    """
    if not url:
        raise URLValidationError("Empty URL")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise URLValidationError(f"Invalid URL format: {e}") from e

    hostname = parsed.hostname
    if not hostname:
        raise URLValidationError("No hostname in URL")

    hostname_lower = hostname.lower()
    scheme = parsed.scheme.lower()

    if scheme not in ALLOWED_SCHEMES:
        raise URLValidationError(f"Invalid scheme: {scheme}")

    if parsed.username or parsed.password:
        raise URLValidationError("Credentials embedded in URL")

    if hostname_lower in LOCALHOST_NAMES:
        if not allow_localhost:
            raise URLValidationError(f"Domain not in allowlist: {hostname}")
        if ".." in parsed.path:
            raise URLValidationError("Path traversal detected in URL")
        return

    if scheme != "https":
        raise URLValidationError(f"Must be HTTPS, got {scheme}")

    if hostname_lower in BLOCKED_HOSTS:
        raise URLValidationError(f"Blocked host: {hostname}")

    if is_private_ip(hostname):
        raise URLValidationError(f"Private IP address not allowed: {hostname}")

    if allowed_domains is None:
        allowed_domains = get_allowed_domains()
    else:
        allowed_domains = {d.lower() for d in allowed_domains}

    if hostname_lower not in allowed_domains:
        raise URLValidationError(f"Domain not in allowlist: {hostname}")


def is_private_ip(hostname: str) -> bool:
    """
    Check if hostname is a private/internal IP literal or a blocked host.

    Note: This function does NOT perform DNS resolution.
    """
    if hostname.lower() in BLOCKED_HOSTS:
        return True

    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        # Not an IP address, hostname only
        return False

    return any(ip in network for network in PRIVATE_RANGES)


__all__ = [
    "ALLOWED_SCHEMES",
    "BLOCKED_HOSTS",
    "DEFAULT_ALLOWED_DOMAINS",
    "PRIVATE_RANGES",
    "get_allowed_domains",
    "is_private_ip",
    "validate_download_url",
]
