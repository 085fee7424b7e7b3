"""
Tests for logging setup.
"""

import logging

from elpris_chat.config.logging import ColoredFormatter, get_logger, setup_logging
from elpris_chat.config.settings import Settings


class TestGetLogger:
    def test_module_name_kept_under_package(self):
        assert get_logger("elpris_chat.llm.orchestrator").name == "elpris_chat.llm.orchestrator"

    def test_short_name_prefixed(self):
        assert get_logger("api").name == "elpris_chat.api"


class TestSetupLogging:
    def test_console_only(self):
        setup_logging(Settings(log_level="DEBUG"))
        logger = logging.getLogger("elpris_chat")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_file_handler_added(self, tmp_path):
        log_file = tmp_path / "logs" / "chat.log"
        setup_logging(Settings(log_level="INFO", log_file=log_file))

        logger = logging.getLogger("elpris_chat")
        assert len(logger.handlers) == 2
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()

        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_uvicorn_shares_handlers(self):
        setup_logging(Settings())
        assert logging.getLogger("uvicorn").handlers == logging.getLogger("elpris_chat").handlers
        assert logging.getLogger("uvicorn.access").propagate is True


class TestColoredFormatter:
    def test_record_levelname_restored(self):
        formatter = ColoredFormatter(fmt="%(levelname)s %(message)s")
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
        output = formatter.format(record)
        assert "\033[33m" in output
        assert record.levelname == "WARNING"
