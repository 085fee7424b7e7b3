"""
Logging configuration and setup.

Console output is colored by level; a plain file handler is added when
``log_file`` is configured. Uvicorn's loggers are routed through the same
handlers so request logs and chat logs share one format.
"""

import logging
import sys
from pathlib import Path

from elpris_chat.config.settings import Settings

_PACKAGE_LOGGER = "elpris_chat"
_FORWARDED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """Formatter that adds color to console output."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with color, leaving the shared record untouched."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _build_handlers(settings: Settings) -> list[logging.Handler]:
    level = getattr(logging, settings.log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        ColoredFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handlers: list[logging.Handler] = [console_handler]

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handlers.append(file_handler)

    return handlers


def setup_logging(settings: Settings) -> None:
    """
    Configure logging based on settings.

    Args:
        settings: Application settings containing log configuration
    """
    level = getattr(logging, settings.log_level)
    handlers = _build_handlers(settings)

    for name in (_PACKAGE_LOGGER, *_FORWARDED_LOGGERS):
        target = logging.getLogger(name)
        target.setLevel(level)
        target.handlers.clear()
        if name in (_PACKAGE_LOGGER, "uvicorn"):
            for handler in handlers:
                target.addHandler(handler)
        # Don't propagate to the root logger
        target.propagate = name not in (_PACKAGE_LOGGER, "uvicorn")

    root_logger = logging.getLogger(_PACKAGE_LOGGER)
    root_logger.info(f"Logging initialized - Level: {settings.log_level}")
    if settings.log_file:
        root_logger.info(f"Logging to file: {settings.log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Module names that already live under the package are used as-is, so
    ``get_logger(__name__)`` and ``get_logger("api")`` both land under the
    ``elpris_chat`` logger tree.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    if name == _PACKAGE_LOGGER or name.startswith(f"{_PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_PACKAGE_LOGGER}.{name}")
