"""
Logging configuration for Shop Insights.

The application logger gets a colored console handler and, when LOG_TO_FILE
is enabled, one rotating file handler under LOG_DIR. Module loggers propagate
to it, so a single handler owns the log file. Settings are read from the
environment so logging works before the configuration layer is loaded.
"""

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import colorlog

APP_LOGGER = "shop_insights"
LOG_FILE_NAME = "shop_insights.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

BRIEF_FORMAT = "%(asctime)s [%(levelname)8s] %(name)s - %(message)s"
DETAILED_FORMAT = "%(asctime)s [%(levelname)8s] %(name)s.%(funcName)s:%(lineno)d - %(message)s"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class LogSettings:
    """Logging options taken from the environment."""
    level: str
    directory: str
    debug_mode: bool
    to_file: bool

    @classmethod
    def from_env(cls) -> "LogSettings":
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            directory=os.getenv("LOG_DIR", "./logs"),
            debug_mode=_env_flag("DEBUG_MODE", "false"),
            to_file=_env_flag("LOG_TO_FILE", "true"),
        )

    @property
    def line_format(self) -> str:
        return DETAILED_FORMAT if self.debug_mode else BRIEF_FORMAT


def _console_handler(settings: LogSettings) -> logging.Handler:
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(colorlog.ColoredFormatter(
        "%(log_color)s" + settings.line_format,
        datefmt=DATE_FORMAT,
        log_colors=LOG_COLORS,
    ))
    return handler


def _file_handler(settings: LogSettings) -> logging.Handler:
    Path(settings.directory).mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(settings.directory, LOG_FILE_NAME),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(settings.line_format, datefmt=DATE_FORMAT))
    return handler


def configure_logger(logger: logging.Logger, settings: Optional[LogSettings] = None) -> logging.Logger:
    """
    Attach handlers to a logger, replacing (and closing) any it already has.

    Args:
        logger: Logger to configure
        settings: Options (defaults to the current environment)

    Returns:
        The same logger
    """
    settings = settings or LogSettings.from_env()

    logger.setLevel(getattr(logging, settings.level, logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(_console_handler(settings))
    if settings.to_file:
        logger.addHandler(_file_handler(settings))
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a module logger.

    Module loggers carry no handlers of their own; records propagate to the
    application logger, which owns the single console and file handler.

    Args:
        name: Logger name. If None, uses the caller's module name.
    """
    if name is None:
        name = sys._getframe(1).f_globals.get("__name__", APP_LOGGER)
    if name != APP_LOGGER and not name.startswith(APP_LOGGER + "."):
        name = f"{APP_LOGGER}.{name}"

    app_logger = logging.getLogger(APP_LOGGER)
    if not app_logger.handlers:
        configure_logger(app_logger)

    logger = logging.getLogger(name)
    logger.propagate = True
    return logger


def setup_logging() -> None:
    """Configure the application logger; call once at startup."""
    settings = LogSettings.from_env()
    logger = configure_logger(logging.getLogger(APP_LOGGER), settings)

    logger.info("Logging system initialized")
    logger.debug(f"Log level: {settings.level}, file logging: {settings.to_file}")
