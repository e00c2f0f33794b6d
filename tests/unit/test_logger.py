"""
Unit tests for logging configuration
"""
import logging
import logging.handlers

import pytest

from shop_insights.utils import logger as logger_module
from shop_insights.utils.logger import APP_LOGGER, get_logger, setup_logging


@pytest.fixture
def file_logging(tmp_path, monkeypatch):
    """Enable file logging into a temporary directory with a tiny rotation size"""
    monkeypatch.setenv("LOG_TO_FILE", "true")
    monkeypatch.setenv("LOG_DIR", str(tmp_path))
    monkeypatch.setattr(logger_module, "LOG_FILE_MAX_BYTES", 300)
    setup_logging()
    yield tmp_path
    monkeypatch.undo()
    setup_logging()


def flush_app_handlers():
    for handler in logging.getLogger(APP_LOGGER).handlers:
        handler.flush()


class TestLogging:
    """Test module loggers and the shared log file"""

    def test_module_loggers_have_no_handlers(self):
        log = get_logger("shop_insights.services.example")

        assert log.handlers == []
        assert log.propagate is True
        assert logging.getLogger(APP_LOGGER).handlers

    def test_foreign_names_are_nested_under_app_logger(self):
        assert get_logger("__main__").name == f"{APP_LOGGER}.__main__"

    def test_single_file_handler(self, file_logging):
        get_logger("shop_insights.first")
        get_logger("shop_insights.second")

        file_handlers = [
            h for h in logging.getLogger(APP_LOGGER).handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert get_logger("shop_insights.first").handlers == []

    def test_rotation_keeps_every_logger_on_current_file(self, file_logging):
        writer = get_logger("shop_insights.writer")
        other = get_logger("shop_insights.other")

        for i in range(10):
            writer.info(f"A-{i} " + "x" * 40)
        assert (file_logging / "shop_insights.log.1").exists()

        other.info("B-AFTER-ROTATION")
        flush_app_handlers()

        current = (file_logging / "shop_insights.log").read_text(encoding="utf-8")
        assert "B-AFTER-ROTATION" in current
