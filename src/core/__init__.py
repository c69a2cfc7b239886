"""
Core library: reusable, domain-agnostic components.

Modules:
    errors      - Error classification and exception hierarchy
    logging     - Structured console/JSON logging with context propagation
    security    - Download URL validation (HTTPS + domain allowlist)
    download    - Bounded async HTTP download to disk (aiohttp)
    utils       - JSON serialization helpers

Design Principles:
    - No knowledge of Node.js release layout (that lives in nodejs_dist)
    - All modules are independently testable
    - Async-first where applicable
"""

from .types import ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
]
