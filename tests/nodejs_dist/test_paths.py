"""Tests for Node.js download path resolution."""

import itertools

import pytest

from core.errors.exceptions import UnsupportedPlatformError
from nodejs_dist.operating_system import Architecture, OperatingSystem, OsType
from nodejs_dist.paths import (
    SHASUMS_FILE_NAME,
    download_file_base_name,
    normalize_version,
    resolve_nodejs_paths,
)

OS_TOKENS = {OsType.WINDOWS: "win", OsType.MACOS: "darwin", OsType.LINUX: "linux"}
ARCH_TOKENS = {
    Architecture.ARM64: "arm64",
    Architecture.ARMV7: "armv7l",
    Architecture.X86: "x86",
    Architecture.X86_64: "x64",
}
EXTENSIONS = {OsType.WINDOWS: "7z", OsType.MACOS: "tar.xz", OsType.LINUX: "tar.xz"}


class TestResolveNodejsPaths:
    def test_linux_x64(self):
        paths = resolve_nodejs_paths("20.9.0", OperatingSystem(OsType.LINUX, Architecture.X86_64))

        assert paths.download_file_name == "node-v20.9.0-linux-x64.tar.xz"
        assert paths.download_url == "https://nodejs.org/dist/v20.9.0/node-v20.9.0-linux-x64.tar.xz"
        assert paths.shasums_file_name == "SHASUMS256.txt.asc"
        assert paths.shasums_url == "https://nodejs.org/dist/v20.9.0/SHASUMS256.txt.asc"

    def test_windows_x64(self):
        paths = resolve_nodejs_paths("20.9.0", OperatingSystem(OsType.WINDOWS, Architecture.X86_64))

        assert paths.download_file_name == "node-v20.9.0-win-x64.7z"
        assert paths.download_url == "https://nodejs.org/dist/v20.9.0/node-v20.9.0-win-x64.7z"
        assert paths.shasums_file_name == "SHASUMS256.txt.asc"

    def test_macos_arm64(self):
        paths = resolve_nodejs_paths("20.9.0", OperatingSystem(OsType.MACOS, Architecture.ARM64))

        assert paths.download_file_name == "node-v20.9.0-darwin-arm64.tar.xz"

    def test_linux_armv7(self):
        paths = resolve_nodejs_paths("18.19.0", OperatingSystem(OsType.LINUX, Architecture.ARMV7))

        assert paths.download_file_name == "node-v18.19.0-linux-armv7l.tar.xz"

    @pytest.mark.parametrize(
        "os_type, architecture", list(itertools.product(OsType, Architecture))
    )
    def test_every_combination(self, os_type, architecture):
        paths = resolve_nodejs_paths("20.9.0", OperatingSystem(os_type, architecture))

        expected_name = (
            f"node-v20.9.0-{OS_TOKENS[os_type]}-{ARCH_TOKENS[architecture]}.{EXTENSIONS[os_type]}"
        )
        assert paths.download_file_name == expected_name
        assert paths.download_url == f"https://nodejs.org/dist/v20.9.0/{expected_name}"
        assert paths.shasums_url == f"https://nodejs.org/dist/v20.9.0/{SHASUMS_FILE_NAME}"

    def test_same_inputs_same_output(self):
        os_ = OperatingSystem(OsType.LINUX, Architecture.ARM64)

        assert resolve_nodejs_paths("20.9.0", os_) == resolve_nodejs_paths("20.9.0", os_)

    def test_leading_v_tolerated(self):
        os_ = OperatingSystem(OsType.LINUX, Architecture.X86_64)

        assert resolve_nodejs_paths("v20.9.0", os_) == resolve_nodejs_paths("20.9.0", os_)

    def test_mirror_base_url(self):
        paths = resolve_nodejs_paths(
            "20.9.0",
            OperatingSystem(OsType.LINUX, Architecture.X86_64),
            dist_base_url="https://mirror.example.com/nodejs/",
        )

        assert paths.download_url == (
            "https://mirror.example.com/nodejs/v20.9.0/node-v20.9.0-linux-x64.tar.xz"
        )

    def test_unknown_os_type_rejected(self):
        with pytest.raises(UnsupportedPlatformError):
            resolve_nodejs_paths("20.9.0", OperatingSystem("freebsd", Architecture.X86_64))

    def test_unknown_architecture_rejected(self):
        with pytest.raises(UnsupportedPlatformError) as exc_info:
            resolve_nodejs_paths("20.9.0", OperatingSystem(OsType.LINUX, "riscv64"))

        assert exc_info.value.architecture == "riscv64"


class TestHelpers:
    def test_normalize_version(self):
        assert normalize_version("v20.9.0") == "20.9.0"
        assert normalize_version(" 20.9.0 ") == "20.9.0"

    @pytest.mark.parametrize("version", ["", "   ", "v", None])
    def test_empty_version_rejected(self, version):
        with pytest.raises(ValueError):
            normalize_version(version)

    def test_download_file_base_name(self):
        os_ = OperatingSystem(OsType.WINDOWS, Architecture.ARM64)

        assert download_file_base_name("20.9.0", os_) == "node-v20.9.0-win-arm64"
