"""
Operating system / architecture model for Node.js distributions.

OperatingSystem is an immutable (type, architecture) pair supplied by the
caller, parsed from user input, or detected from the host.
"""

import platform
from dataclasses import dataclass
from enum import Enum

from core.errors.exceptions import UnsupportedPlatformError


class OsType(Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"


class Architecture(Enum):
    ARM64 = "arm64"
    ARMV7 = "armv7"
    X86 = "x86"
    X86_64 = "x86_64"


# Names accepted by OperatingSystem.parse(), lower-cased
_OS_TYPE_ALIASES = {
    "windows": OsType.WINDOWS,
    "win": OsType.WINDOWS,
    "win32": OsType.WINDOWS,
    "macos": OsType.MACOS,
    "mac": OsType.MACOS,
    "osx": OsType.MACOS,
    "darwin": OsType.MACOS,
    "linux": OsType.LINUX,
}

_ARCHITECTURE_ALIASES = {
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
    "armv8": Architecture.ARM64,
    "armv7": Architecture.ARMV7,
    "armv7l": Architecture.ARMV7,
    "arm": Architecture.ARMV7,
    "x86": Architecture.X86,
    "i386": Architecture.X86,
    "i686": Architecture.X86,
    "x86_64": Architecture.X86_64,
    "x64": Architecture.X86_64,
    "amd64": Architecture.X86_64,
}


@dataclass(frozen=True)
class OperatingSystem:
    """An operating system type together with a CPU architecture."""

    type: OsType
    architecture: Architecture

    def __str__(self) -> str:
        os_type = getattr(self.type, "value", self.type)
        architecture = getattr(self.architecture, "value", self.architecture)
        return f"{os_type}-{architecture}"

    @classmethod
    def parse(cls, os_type: str, architecture: str) -> "OperatingSystem":
        """
        Build an OperatingSystem from user-supplied names.

        Accepts enum values as well as the usual aliases (``darwin``, ``win``,
        ``x64``, ``aarch64``, ``armv7l`` ...), case-insensitively.

        Raises:
            UnsupportedPlatformError: If either name is not recognized
        """
        parsed_type = _OS_TYPE_ALIASES.get(str(os_type).strip().lower())
        if parsed_type is None:
            raise UnsupportedPlatformError(
                f"Unsupported operating system type: {os_type!r} "
                f"(supported: {', '.join(t.value for t in OsType)})",
                os_type=os_type,
                architecture=architecture,
            )

        parsed_arch = _ARCHITECTURE_ALIASES.get(str(architecture).strip().lower())
        if parsed_arch is None:
            raise UnsupportedPlatformError(
                f"Unsupported architecture: {architecture!r} "
                f"(supported: {', '.join(a.value for a in Architecture)})",
                os_type=os_type,
                architecture=architecture,
            )

        return cls(type=parsed_type, architecture=parsed_arch)

    @classmethod
    def current(cls) -> "OperatingSystem":
        """Detect the host operating system and architecture."""
        return cls.parse(platform.system(), platform.machine())


__all__ = ["OsType", "Architecture", "OperatingSystem"]
