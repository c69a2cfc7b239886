"""
SHASUMS256 checksum list parsing.

The Node.js release checksum list is a sequence of ``<sha256>  <file name>``
lines wrapped in an OpenPGP cleartext-signature envelope
(``-----BEGIN PGP SIGNED MESSAGE-----``). Only the signed body is read when
the envelope is present; lines that are not checksum entries are ignored.
"""

import re
from pathlib import Path

from core.errors.exceptions import ChecksumListMalformedError

SHA256_HEX_LENGTH = 64

# <64 hex chars><whitespace>+[*]<file name>; "*" is the binary-mode marker
# written by `sha256sum -b`
CHECKSUM_LINE_PATTERN = re.compile(
    r"^(?P<hash>[0-9a-fA-F]{%d})\s+\*?(?P<file_name>\S(?:.*\S)?)\s*$" % SHA256_HEX_LENGTH
)

SIGNED_MESSAGE_HEADER = "-----BEGIN PGP SIGNED MESSAGE-----"
SIGNATURE_HEADER = "-----BEGIN PGP SIGNATURE-----"


def extract_signed_text(text: str) -> str:
    """
    Return the signed body of a cleartext-signed message.

    Armor headers (``Hash: SHA256``) and the signature block are dropped and
    dash-escaped lines (``- -----``) are restored. Text without an envelope
    is returned unchanged.
    """
    lines = text.splitlines()
    try:
        start = next(i for i, line in enumerate(lines) if line.strip() == SIGNED_MESSAGE_HEADER)
    except StopIteration:
        return text

    index = start + 1
    # Armor headers end at the first blank line
    while index < len(lines) and lines[index].strip():
        index += 1

    body = []
    for line in lines[index + 1:]:
        if line.strip() == SIGNATURE_HEADER:
            break
        body.append(line[2:] if line.startswith("- ") else line)

    return "\n".join(body)


def parse_shasums(text: str, source: str | None = None) -> dict[str, str]:
    """
    Parse a checksum list into ``{file name: lower-case sha256 hex}``.

    Duplicate file names keep their first occurrence.

    Args:
        text: Contents of SHASUMS256.txt or SHASUMS256.txt.asc
        source: Where the text came from, used in error context

    Returns:
        Mapping of file name to expected SHA-256 hex digest

    Raises:
        ChecksumListMalformedError: If no checksum entries are found
    """
    checksums: dict[str, str] = {}

    for line in extract_signed_text(text).splitlines():
        match = CHECKSUM_LINE_PATTERN.match(line.strip())
        if match is None:
            continue
        checksums.setdefault(match.group("file_name"), match.group("hash").lower())

    if not checksums:
        location = f" in {source}" if source else ""
        raise ChecksumListMalformedError(
            f"No SHA-256 checksum entries found{location}", source=source
        )

    return checksums


def load_shasums_file(path: Path) -> dict[str, str]:
    """
    Read and parse a checksum list file (UTF-8).

    Raises:
        ChecksumListMalformedError: If the file cannot be read, is not UTF-8
            text (an HTML error page, a truncated body), or has no entries
    """
    path = Path(path)
    source = str(path.absolute())
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ChecksumListMalformedError(
            f"Checksum list {source} is not UTF-8 text", source=source, cause=e
        ) from e
    except OSError as e:
        raise ChecksumListMalformedError(
            f"Unable to read checksum list {source}", source=source, cause=e
        ) from e
    return parse_shasums(text, source=source)


__all__ = [
    "CHECKSUM_LINE_PATTERN",
    "extract_signed_text",
    "parse_shasums",
    "load_shasums_file",
]
