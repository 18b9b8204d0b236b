"""
Logging configuration for the Productivity Hub alarm engine.
Colored console output plus a rotating log file, both attached to the
package namespace so every module logger reaches them.
"""

import logging
import logging.handlers
import colorlog
from config.settings import LOGS_DIR, LOG_FILE_NAME, LOG_FILE_MAX_BYTES, LOG_FILE_BACKUPS, DEBUG_MODE

# Every module logger lives under the "src" package namespace
APP_LOGGER_NAME = "src"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


def _console_handler(level: int) -> logging.Handler:
    handler = colorlog.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(colorlog.ColoredFormatter(
        "%(log_color)s" + LOG_FORMAT,
        datefmt=DATE_FORMAT,
        log_colors=LOG_COLORS
    ))
    return handler


def _file_handler() -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        LOGS_DIR / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS
    )
    # The file keeps DEBUG whatever the console level is
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(name: str = APP_LOGGER_NAME, level: int = None) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        name: Logger name (the package namespace module loggers hang off)
        level: Console logging level (defaults based on DEBUG_MODE)

    Returns:
        Configured logger instance
    """
    if level is None:
        level = logging.DEBUG if DEBUG_MODE else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    logger.addHandler(_console_handler(level))
    logger.addHandler(_file_handler())

    # Minute ticks would otherwise flood the log
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Module logger; configures the package logger on first use."""
    if not logging.getLogger(APP_LOGGER_NAME).handlers:
        setup_logging(APP_LOGGER_NAME)

    return logging.getLogger(name)
