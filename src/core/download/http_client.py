"""
HTTP session factory for downloads using aiohttp.

Centralizes connection pooling, SSL verification and transport timeouts so
every download in a run shares one consistently configured session.
"""

import aiohttp

from core import __version__

DEFAULT_USER_AGENT = f"nodejs-dist/{__version__} (+aiohttp)"


def create_session(
    max_connections: int = 10,
    max_connections_per_host: int = 4,
    enable_ssl: bool = True,
    timeout_total: int = 300,
    timeout_connect: int = 30,
    timeout_sock_read: int = 60,
    timeout_sock_connect: int = 30,
    user_agent: str = DEFAULT_USER_AGENT,
    trust_env: bool = True,
) -> aiohttp.ClientSession:
    """
    Create aiohttp ClientSession with connection pooling and timeouts.

    Timeout configuration prevents indefinite hangs:
    - timeout_total: Total time for the entire request (default: 300s)
    - timeout_connect: Time to acquire a connection (default: 30s)
    - timeout_sock_read: Time between reads (default: 60s)
    - timeout_sock_connect: Socket connection timeout (default: 30s)

    Per-request timeouts passed to session.get() override these.

    Args:
        max_connections: Total connection pool size
        max_connections_per_host: Per-host connection limit
        enable_ssl: Enable SSL verification (only disable for testing)
        timeout_total: Total timeout in seconds
        timeout_connect: Connection timeout in seconds
        timeout_sock_read: Socket read timeout in seconds
        timeout_sock_connect: Socket connection timeout in seconds
        user_agent: User-Agent header sent with every request
        trust_env: Honour HTTP(S)_PROXY / NO_PROXY environment variables

    Returns:
        Configured aiohttp.ClientSession

    Note:
        Caller is responsible for session lifecycle management.
        Use async context manager for automatic cleanup:

        async with create_session() as session:
            result, error = await download_to_file(url, path, session, max_bytes=...)
    """
    connector = aiohttp.TCPConnector(
        limit=max_connections,
        limit_per_host=max_connections_per_host,
        ssl=enable_ssl,
        ttl_dns_cache=300,
    )

    timeout = aiohttp.ClientTimeout(
        total=timeout_total,
        connect=timeout_connect,
        sock_read=timeout_sock_read,
        sock_connect=timeout_sock_connect,
    )

    return aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        headers={"User-Agent": user_agent},
        trust_env=trust_env,
    )


__all__ = [
    "DEFAULT_USER_AGENT",
    "create_session",
]
