"""Logging setup and configuration."""

import io
import logging
import secrets
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter

# Default settings
DEFAULT_LOG_NAME = "nodejs_dist"
DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB per log file
DEFAULT_BACKUP_COUNT = 5

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "aiohttp",
    "aiohttp.access",
    "aiohttp.client",
    "asyncio",
    "gnupg",
    "urllib3",
]


def get_log_file_path(
    log_dir: Path,
    stage: str | None = None,
    run_id: str | None = None,
) -> Path:
    """
    Build log file path with a date subfolder.

    Structure: {log_dir}/{YYYY-MM-DD}/nodejs_dist_{stage}_{MMDD}_{HHMM}_{run}.log

    Examples:
        logs/2026-10-19/nodejs_dist_download_1019_1430_c3f1.log
        logs/2026-10-19/nodejs_dist_1019_0930_9ab2.log

    Args:
        log_dir: Base log directory
        stage: Optional stage name included in the file name
        run_id: Run identifier; its last four characters keep concurrent
            runs from writing to the same file (random when omitted)

    Returns:
        Full path to log file
    """
    now = datetime.now()
    date_folder = now.strftime("%Y-%m-%d")
    date_str = now.strftime("%m%d")
    time_str = now.strftime("%H%M")

    if stage:
        base_name = f"{DEFAULT_LOG_NAME}_{stage}_{date_str}_{time_str}"
    else:
        base_name = f"{DEFAULT_LOG_NAME}_{date_str}_{time_str}"

    suffix = run_id[-4:] if run_id else secrets.token_hex(2)
    return log_dir / date_folder / f"{base_name}_{suffix}.log"


def setup_logging(
    name: str = DEFAULT_LOG_NAME,
    stage: str | None = None,
    run_id: str | None = None,
    log_dir: Path | None = None,
    json_format: bool = False,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    suppress_noisy: bool = True,
) -> logging.Logger:
    """
    Configure console logging and, when log_dir is given, a rotating file log.

    The console always uses ConsoleFormatter. With json_format=True the
    console switches to JSONFormatter too (one object per line, for CI log
    collectors); file logs are always JSON.

    Args:
        name: Logger name returned to the caller
        stage: Stage name stored in the log context
        run_id: Run identifier stored in the log context
        log_dir: Directory for log files (None = console only)
        json_format: Emit JSON lines on the console
        console_level: Console handler level (default: INFO)
        file_level: File handler level (default: DEBUG)
        max_bytes: Rotate the log file after this many bytes
        backup_count: Number of rotated files to keep
        suppress_noisy: Quiet down HTTP client and gnupg loggers

    Returns:
        Configured logger instance
    """
    if run_id:
        set_log_context(run_id=run_id)
    if stage:
        set_log_context(stage=stage)

    if sys.platform == "win32":
        safe_stdout = io.TextIOWrapper(
            sys.stdout.buffer, encoding="utf-8", errors="replace"
        )
        console_handler = logging.StreamHandler(safe_stdout)
    else:
        console_handler = logging.StreamHandler(sys.stdout)

    console_handler.setLevel(console_level)
    console_handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    log_file = None
    if log_dir is not None:
        log_file = get_log_file_path(Path(log_dir), stage=stage, run_id=run_id)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug(
        f"Logging initialized: console_level={logging.getLevelName(console_level)}, "
        f"log_file={log_file}",
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Use this instead of logging.getLogger() to ensure consistent naming.
    """
    return logging.getLogger(name)


def log_task_startup(
    logger: logging.Logger,
    task_name: str,
    settings: dict | None = None,
) -> None:
    """
    Log a banner with the task name and its effective settings.

    Args:
        logger: Logger instance to use
        task_name: Name of the task starting up
        settings: Key/value settings to log, one per line
    """
    logger.info("=" * 70)
    logger.info("Starting %s", task_name)
    logger.info("=" * 70)

    if settings:
        for key, value in settings.items():
            logger.info("%s: %s", key, value)

    logger.info("=" * 70)


def generate_run_id() -> str:
    """
    Generate unique run identifier.

    Format: r-YYYYMMDD-HHMMSS-XXXX where XXXX is random hex.
    """
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    suffix = secrets.token_hex(2)
    return f"r-{ts}-{suffix}"
