"""Shared JSON serialization utilities for type-safe JSON encoding."""

from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date)):
        return True, obj.isoformat()
    if isinstance(obj, Enum):
        return True, obj.value
    if isinstance(obj, Path):
        return True, str(obj)
    if isinstance(obj, (set, frozenset)):
        return True, sorted(str(item) for item in obj)
    if isinstance(obj, bytes):
        return True, obj.hex()
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    Type-safe JSON serializer used by the JSON log formatter.

    - datetime/date → ISO 8601 string
    - Enum → value
    - Path → string
    - set/frozenset → sorted list of strings
    - bytes → hex string
    - Everything else → string (fallback)

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    return str(obj)


__all__ = ["json_serializer"]
