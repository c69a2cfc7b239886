"""Node.js distribution download configuration from YAML file.

Loads from config/config.yaml with all settings in one place:
- Release selection (version, distribution mirror, output directory)
- Download limits and timeouts
- Signature verification settings
- Logging settings

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

# Configure module logger
logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        # Support both ${VAR} and ${VAR:-default} syntax
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


# Default config file: config.yaml next to this module
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"

DEFAULT_DIST_BASE_URL = "https://nodejs.org/dist"
DEFAULT_KEYSERVER = "hkps://keyserver.ubuntu.com"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# nodejs_dist key -> environment variable that overrides it
ENV_OVERRIDES = {
    "node_version": "NODEJS_VERSION",
    "output_directory": "NODEJS_DIST_OUTPUT_DIR",
    "dist_base_url": "NODEJS_DIST_BASE_URL",
}


@dataclass
class NodeDistConfig:
    """Node.js distribution download configuration.

    Configuration structure:
        nodejs_dist:
          node_version: "20.9.0"
          dist_base_url: https://nodejs.org/dist
          output_directory: build/nodejs
          download: {...}       # Size caps, timeouts, allowlist
          verification: {...}   # Signature requirements and gpg settings
          logging: {...}        # Console / file logging

    All timing values in seconds.
    """

    # =========================================================================
    # RELEASE SELECTION
    # =========================================================================
    node_version: str = ""
    dist_base_url: str = DEFAULT_DIST_BASE_URL
    output_directory: str = "build/nodejs"

    # =========================================================================
    # DOWNLOAD SETTINGS
    # =========================================================================
    archive_max_bytes: int = 200_000_000
    shasums_max_bytes: int = 100_000
    timeout_seconds: int = 300
    sock_read_timeout_seconds: int = 30
    concurrent_downloads: bool = False
    allowed_domains: List[str] = field(default_factory=lambda: ["nodejs.org"])
    allow_localhost: bool = False

    # =========================================================================
    # VERIFICATION SETTINGS
    # =========================================================================
    require_signature: bool = True
    key_list: Optional[str] = None  # None = bundled Node.js release keys
    gpg_binary: str = "gpg"
    keyserver: Optional[str] = DEFAULT_KEYSERVER

    # =========================================================================
    # LOGGING SETTINGS
    # =========================================================================
    log_level: str = "INFO"
    json_logs: bool = False
    log_dir: Optional[str] = None

    def validate(self) -> None:
        """Validate configuration for correctness and constraints.

        Checks required fields, byte caps, timeouts, and enum values.
        """
        if not str(self.node_version).strip():
            raise ValueError("node_version is required in nodejs_dist section")

        if not self.dist_base_url.startswith(("https://", "http://")):
            raise ValueError(
                f"dist_base_url must be an http(s) URL, got '{self.dist_base_url}'"
            )

        if not self.output_directory:
            raise ValueError("output_directory is required in nodejs_dist section")

        settings = {
            "archive_max_bytes": self.archive_max_bytes,
            "shasums_max_bytes": self.shasums_max_bytes,
            "timeout_seconds": self.timeout_seconds,
            "sock_read_timeout_seconds": self.sock_read_timeout_seconds,
        }
        for key in settings:
            self._validate_min(settings, key, 0, inclusive=False, context="download")

        self._validate_enum(
            {"level": self.log_level}, "level", VALID_LOG_LEVELS, context="logging"
        )

    @staticmethod
    def _validate_enum(
        settings: Dict[str, Any],
        key: str,
        valid_values: List[Any],
        context: str
    ) -> None:
        """Validate that a setting's value is in a list of valid values."""
        if key in settings and settings[key] not in valid_values:
            raise ValueError(
                f"{context}: {key} must be one of {valid_values}, "
                f"got '{settings[key]}'"
            )

    @staticmethod
    def _validate_min(
        settings: Dict[str, Any],
        key: str,
        min_value: float,
        inclusive: bool,
        context: str
    ) -> None:
        """Validate that a setting's value meets a minimum threshold."""
        if key in settings:
            value = settings[key]
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"{context}: {key} must be a number, got {value!r}")
            if inclusive and value < min_value:
                raise ValueError(
                    f"{context}: {key} must be >= {min_value}, got {value}"
                )
            elif not inclusive and value <= min_value:
                raise ValueError(
                    f"{context}: {key} must be > {min_value}, got {value}"
                )

    def to_settings(self) -> Dict[str, Any]:
        """Effective settings for the startup log banner."""
        return {
            "Node.js version": self.node_version,
            "Distribution": self.dist_base_url,
            "Output directory": self.output_directory,
            "Archive limit (bytes)": self.archive_max_bytes,
            "Checksum list limit (bytes)": self.shasums_max_bytes,
            "Concurrent downloads": self.concurrent_downloads,
            "Signature required": self.require_signature,
            "Key list": self.key_list or "bundled",
        }


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _as_int(value: Any, key: str) -> Any:
    # YAML env expansion leaves numbers as strings
    if isinstance(value, str):
        try:
            return int(value.replace("_", ""))
        except ValueError:
            raise ValueError(f"{key} must be an integer, got '{value}'") from None
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> NodeDistConfig:
    """Load Node.js distribution configuration from config.yaml file.

    Overrides use the same nested shape as the nodejs_dist section, e.g.
    {"download": {"archive_max_bytes": 1000}}.

    Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
    NODEJS_VERSION, NODEJS_DIST_OUTPUT_DIR and NODEJS_DIST_BASE_URL override
    the file values; explicit overrides win over both.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n" f"Expected file: config/config.yaml"
        )

    logger.debug(f"Loading configuration from file: {config_path}")
    yaml_data = load_yaml(config_path)
    yaml_data = _expand_env_vars(yaml_data)

    if "nodejs_dist" not in yaml_data:
        raise ValueError(
            "Invalid config file: missing 'nodejs_dist:' section\n"
            "See src/config/config.yaml for correct structure"
        )

    dist_config = yaml_data["nodejs_dist"] or {}

    env_overrides = {
        key: os.getenv(var_name)
        for key, var_name in ENV_OVERRIDES.items()
        if os.getenv(var_name)
    }
    if env_overrides:
        logger.debug(f"Applying environment overrides: {list(env_overrides.keys())}")
        dist_config = _deep_merge(dist_config, env_overrides)

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        dist_config = _deep_merge(dist_config, overrides)

    download = dist_config.get("download") or {}
    verification = dist_config.get("verification") or {}
    logging_config = dist_config.get("logging") or {}

    config = NodeDistConfig(
        node_version=str(dist_config.get("node_version") or "").strip(),
        dist_base_url=dist_config.get("dist_base_url") or DEFAULT_DIST_BASE_URL,
        output_directory=str(dist_config.get("output_directory") or "build/nodejs"),
        archive_max_bytes=_as_int(download.get("archive_max_bytes", 200_000_000), "archive_max_bytes"),
        shasums_max_bytes=_as_int(download.get("shasums_max_bytes", 100_000), "shasums_max_bytes"),
        timeout_seconds=_as_int(download.get("timeout_seconds", 300), "timeout_seconds"),
        sock_read_timeout_seconds=_as_int(
            download.get("sock_read_timeout_seconds", 30), "sock_read_timeout_seconds"
        ),
        concurrent_downloads=_as_bool(download.get("concurrent_downloads", False)),
        allowed_domains=list(download.get("allowed_domains") or ["nodejs.org"]),
        allow_localhost=_as_bool(download.get("allow_localhost", False)),
        require_signature=_as_bool(verification.get("require_signature", True)),
        key_list=verification.get("key_list") or None,
        gpg_binary=verification.get("gpg_binary") or "gpg",
        keyserver=verification.get("keyserver", DEFAULT_KEYSERVER) or None,
        log_level=str(logging_config.get("level", "INFO")).upper(),
        json_logs=_as_bool(logging_config.get("json", False)),
        log_dir=logging_config.get("log_dir") or None,
    )

    logger.debug(f"Configuration loaded successfully:")
    logger.debug(f"  - Node.js version: {config.node_version}")
    logger.debug(f"  - Distribution: {config.dist_base_url}")
    logger.debug(f"  - Signature required: {config.require_signature}")

    logger.debug("Validating configuration...")
    config.validate()
    logger.debug("Configuration validation passed")

    return config
