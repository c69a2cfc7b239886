"""
Trusted Node.js release signing keys.

The key list is a plain text file. Each entry is either a primary key
fingerprint or the path of an ASCII-armored public key file, relative to the
list's own directory. The bundled list ships inside the package under
``resources/nodejs_release_signing_keys/keys.list``.
"""

import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from core.errors.exceptions import TrustedKeysError

KEY_LIST_PACKAGE = "nodejs_dist"
KEY_LIST_RESOURCE_PATH = "resources/nodejs_release_signing_keys/keys.list"

FINGERPRINT_PATTERN = re.compile(r"^(?P<fingerprint>[0-9A-Fa-f]{40})(?:\s+.*)?$")


@dataclass(frozen=True)
class TrustedKeySet:
    """
    Keys allowed to sign a checksum list.

    Attributes:
        fingerprints: Upper-case primary key fingerprints
        armored_keys: ASCII-armored public key blocks to import
        source: Where the list was loaded from (for logs and errors)
    """

    fingerprints: frozenset[str]
    armored_keys: tuple[str, ...]
    source: str

    def __len__(self) -> int:
        return len(self.fingerprints) + len(self.armored_keys)


def _default_key_list():
    return resources.files(KEY_LIST_PACKAGE).joinpath(KEY_LIST_RESOURCE_PATH)


def load_trusted_keys(resource: Path | None = None) -> TrustedKeySet:
    """
    Load the trusted key set from a key list.

    Args:
        resource: Path of a key list file (None = bundled list)

    Returns:
        TrustedKeySet with fingerprints and any armored key blocks

    Raises:
        TrustedKeysError: If the list or a referenced key file cannot be
            read, or the list has no entries
    """
    key_list = _default_key_list() if resource is None else Path(resource)
    source = str(key_list)

    try:
        text = key_list.read_text(encoding="utf-8")
    except OSError as e:
        raise TrustedKeysError(
            f"Unable to read trusted key list {source}",
            cause=e,
            context={"key_list": source},
        ) from e

    fingerprints = set()
    armored_keys = []

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        match = FINGERPRINT_PATTERN.match(line)
        if match:
            fingerprints.add(match.group("fingerprint").upper())
            continue

        key_file = key_list.parent.joinpath(line) if isinstance(key_list, Path) else _sibling(line)
        try:
            armored_keys.append(key_file.read_text(encoding="ascii"))
        except (OSError, UnicodeDecodeError) as e:
            raise TrustedKeysError(
                f"Unable to read key file {line!r} (line {line_number} of {source})",
                cause=e,
                context={"key_list": source, "file_name": line},
            ) from e

    if not fingerprints and not armored_keys:
        raise TrustedKeysError(
            f"Trusted key list {source} has no entries",
            context={"key_list": source},
        )

    return TrustedKeySet(
        fingerprints=frozenset(fingerprints),
        armored_keys=tuple(armored_keys),
        source=source,
    )


def _sibling(name: str):
    key_dir = KEY_LIST_RESOURCE_PATH.rsplit("/", 1)[0]
    return resources.files(KEY_LIST_PACKAGE).joinpath(f"{key_dir}/{name}")


__all__ = [
    "KEY_LIST_RESOURCE_PATH",
    "TrustedKeySet",
    "load_trusted_keys",
]
