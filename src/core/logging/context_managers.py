"""Context managers for structured logging."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from core.logging.context import get_log_context, set_log_context
from core.logging.utilities import log_with_context


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(stage="download_archive", run_id=run_id):
            # All logs in this block will have stage and run_id
            await do_work()
    """

    def __init__(
        self,
        run_id: Optional[str] = None,
        stage: Optional[str] = None,
        platform: Optional[str] = None,
        node_version: Optional[str] = None,
    ):
        self.new_context = {
            "run_id": run_id,
            "stage": stage,
            "platform": platform,
            "node_version": node_version,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        for key, value in self.new_context.items():
            if value is not None:
                set_log_context(**{key: value})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Restore old context
        set_log_context(
            run_id=self.old_context.get("run_id", ""),
            stage=self.old_context.get("stage", ""),
            platform=self.old_context.get("platform", ""),
            node_version=self.old_context.get("node_version", ""),
        )
        return False


@contextmanager
def log_phase(
    logger: logging.Logger,
    phase: str,
    level: int = logging.DEBUG,
    **context: Any,
):
    """
    Context manager for timing a phase and tagging its records with a stage.

    Args:
        logger: Logger instance
        phase: Phase name (also used as the log context stage)
        level: Log level for completion message
        **context: Additional context fields

    Example:
        with log_phase(logger, "verify_hash", file_name=name):
            verify_file_hash(path, checksums)
    """
    # Convert string level names to integers
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    start = time.perf_counter()
    with LogContext(stage=phase):
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            log_with_context(
                logger,
                level,
                f"Phase complete: {phase}",
                duration_ms=round(duration_ms, 2),
                **context,
            )
