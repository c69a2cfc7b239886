"""Tests for logging setup and configuration."""

import json
import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from core.logging.context import clear_log_context, get_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter
from core.logging.setup import (
    DEFAULT_LOG_NAME,
    NOISY_LOGGERS,
    generate_run_id,
    get_log_file_path,
    get_logger,
    log_task_startup,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    clear_log_context()
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_log_context()


class TestGetLogFilePath:

    def test_builds_path_with_stage(self):
        path = get_log_file_path(Path("logs"), stage="download", run_id="r-20261019-1200-abcd")

        assert path.parent.parent == Path("logs")
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", path.parent.name)
        assert path.name.startswith(f"{DEFAULT_LOG_NAME}_download_")
        assert path.name.endswith("_abcd.log")

    def test_builds_path_without_stage(self):
        path = get_log_file_path(Path("logs"))

        assert re.fullmatch(rf"{DEFAULT_LOG_NAME}_\d{{4}}_\d{{4}}_[0-9a-f]{{4}}\.log", path.name)


class TestSetupLogging:

    def test_console_only(self):
        logger = setup_logging(name="nodejs_dist.test", run_id="r-1-2-abcd", stage="nodejs_dist")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)
        assert logger.name == "nodejs_dist.test"
        assert get_log_context()["run_id"] == "r-1-2-abcd"
        assert get_log_context()["stage"] == "nodejs_dist"

    def test_json_console(self):
        setup_logging(json_format=True)

        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_console_level(self):
        setup_logging(console_level=logging.WARNING)

        assert logging.getLogger().handlers[0].level == logging.WARNING

    def test_file_handler_writes_json(self, tmp_path):
        logger = setup_logging(log_dir=tmp_path, run_id="r-1-2-beef")
        logger.info("hello", extra={"file_name": "node.tar.xz"})

        root = logging.getLogger()
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        file_handlers[0].flush()

        log_files = list(tmp_path.rglob("*.log"))
        assert len(log_files) == 1
        lines = [json.loads(line) for line in log_files[0].read_text().splitlines()]
        hello = [line for line in lines if line["message"] == "hello"]
        assert hello[0]["file_name"] == "node.tar.xz"
        assert hello[0]["run_id"] == "r-1-2-beef"

    def test_suppresses_noisy_loggers(self):
        setup_logging()

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1


class TestHelpers:

    def test_get_logger(self):
        assert get_logger("nodejs_dist.task") is logging.getLogger("nodejs_dist.task")

    def test_generate_run_id_format(self):
        run_id = generate_run_id()

        assert re.fullmatch(r"r-\d{8}-\d{6}-[0-9a-f]{4}", run_id)
        assert generate_run_id() != run_id

    def test_log_task_startup(self, caplog):
        logger = logging.getLogger("nodejs_dist.startup")

        with caplog.at_level(logging.INFO, logger="nodejs_dist.startup"):
            log_task_startup(logger, "Node.js download", {"Node.js version": "20.9.0"})

        messages = [r.getMessage() for r in caplog.records]
        assert "Starting Node.js download" in messages
        assert "Node.js version: 20.9.0" in messages
