"""
Node.js release download locations.

Pure functions mapping (version, operating system) to the URLs and file
names of a release's binary distribution archive and its signed checksum
list. No I/O happens here.

Examples of resolved download file names:
    node-v20.9.0-darwin-arm64.tar.xz
    node-v20.9.0-darwin-x64.tar.xz
    node-v20.9.0-linux-arm64.tar.xz
    node-v20.9.0-linux-armv7l.tar.xz
    node-v20.9.0-linux-x64.tar.xz
    node-v20.9.0-win-arm64.7z
    node-v20.9.0-win-x64.7z
    node-v20.9.0-win-x86.7z
"""

from dataclasses import dataclass

from core.errors.exceptions import UnsupportedPlatformError
from nodejs_dist.operating_system import Architecture, OperatingSystem, OsType

DEFAULT_DIST_BASE_URL = "https://nodejs.org/dist"

SHASUMS_FILE_NAME = "SHASUMS256.txt.asc"

OS_TOKENS = {
    OsType.WINDOWS: "win",
    OsType.MACOS: "darwin",
    OsType.LINUX: "linux",
}

ARCHITECTURE_TOKENS = {
    Architecture.ARM64: "arm64",
    Architecture.ARMV7: "armv7l",
    Architecture.X86: "x86",
    Architecture.X86_64: "x64",
}

FILE_EXTENSIONS = {
    OsType.WINDOWS: "7z",
    OsType.MACOS: "tar.xz",
    OsType.LINUX: "tar.xz",
}


@dataclass(frozen=True)
class NodeJsPaths:
    """Where to fetch a Node.js binary distribution and its checksum list."""

    download_url: str
    download_file_name: str
    shasums_url: str
    shasums_file_name: str


def normalize_version(version: str) -> str:
    """Strip whitespace and a leading ``v``; ``"v20.9.0"`` becomes ``"20.9.0"``."""
    normalized = (version or "").strip()
    if normalized[:1] in ("v", "V"):
        normalized = normalized[1:]
    if not normalized:
        raise ValueError(f"Invalid Node.js version: {version!r}")
    return normalized


def _lookup(table: dict, key, what: str, operating_system) -> str:
    try:
        return table[key]
    except (KeyError, TypeError):
        raise UnsupportedPlatformError(
            f"Unable to determine Node.js download {what} for {key!r}",
            os_type=getattr(operating_system, "type", None),
            architecture=getattr(operating_system, "architecture", None),
        ) from None


def download_file_base_name(version: str, operating_system: OperatingSystem) -> str:
    """File name without the ``.7z`` / ``.tar.xz`` extension, e.g. ``node-v20.9.0-linux-x64``."""
    os_token = _lookup(OS_TOKENS, operating_system.type, "operating system token", operating_system)
    arch_token = _lookup(
        ARCHITECTURE_TOKENS, operating_system.architecture, "architecture token", operating_system
    )
    return f"node-v{normalize_version(version)}-{os_token}-{arch_token}"


def resolve_nodejs_paths(
    version: str,
    operating_system: OperatingSystem,
    dist_base_url: str = DEFAULT_DIST_BASE_URL,
) -> NodeJsPaths:
    """
    Resolve download URLs and file names for a Node.js release.

    Args:
        version: Node.js version, with or without a leading ``v``
        operating_system: Target operating system and architecture
        dist_base_url: Distribution root (a mirror may be used)

    Returns:
        NodeJsPaths for the archive and SHASUMS256.txt.asc

    Raises:
        UnsupportedPlatformError: If the OS type or architecture has no mapping
        ValueError: If the version is empty

    Example:
        >>> paths = resolve_nodejs_paths("20.9.0", OperatingSystem(OsType.LINUX, Architecture.X86_64))
        >>> paths.download_url
        'https://nodejs.org/dist/v20.9.0/node-v20.9.0-linux-x64.tar.xz'
    """
    normalized_version = normalize_version(version)
    extension = _lookup(FILE_EXTENSIONS, operating_system.type, "file extension", operating_system)
    download_file_name = f"{download_file_base_name(normalized_version, operating_system)}.{extension}"

    url_prefix = f"{dist_base_url.rstrip('/')}/v{normalized_version}"

    return NodeJsPaths(
        download_url=f"{url_prefix}/{download_file_name}",
        download_file_name=download_file_name,
        shasums_url=f"{url_prefix}/{SHASUMS_FILE_NAME}",
        shasums_file_name=SHASUMS_FILE_NAME,
    )


__all__ = [
    "DEFAULT_DIST_BASE_URL",
    "SHASUMS_FILE_NAME",
    "NodeJsPaths",
    "normalize_version",
    "download_file_base_name",
    "resolve_nodejs_paths",
]
