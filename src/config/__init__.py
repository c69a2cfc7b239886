"""Configuration loading for the Node.js distribution downloader.

Configuration is loaded from a single YAML file, src/config/config.yaml by
default.

Main Functions
--------------

    - load_config(): Load configuration from a YAML file

Usage Examples
--------------

Load configuration:
    >>> from config import load_config
    >>>
    >>> config = load_config()
    >>> config.node_version
    '20.9.0'

Custom config path and overrides:
    >>> from pathlib import Path
    >>> config = load_config(
    ...     config_path=Path("/custom/path/config.yaml"),
    ...     overrides={"download": {"archive_max_bytes": 50_000_000}},
    ... )

Configuration Priority
---------------------

Settings are merged in the following priority (highest to lowest):

1. Explicit overrides (CLI flags)
2. Environment variables (NODEJS_VERSION, NODEJS_DIST_OUTPUT_DIR, NODEJS_DIST_BASE_URL)
3. YAML configuration file
4. Dataclass defaults
"""

from config.config import (
    DEFAULT_CONFIG_FILE,
    NodeDistConfig,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "load_config",
    "NodeDistConfig",
]
