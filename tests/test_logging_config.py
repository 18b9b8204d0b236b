import logging
import logging.handlers

from config import settings
from config.logging_config import APP_LOGGER_NAME, get_logger


def test_module_loggers_reach_package_handlers():
    logger = get_logger("src.alarm.controller")
    package_logger = logging.getLogger(APP_LOGGER_NAME)

    assert logger.name.startswith(APP_LOGGER_NAME + ".")
    assert len(package_logger.handlers) == 2


def test_file_handler_rotates_and_keeps_debug():
    get_logger("src")
    handlers = logging.getLogger(APP_LOGGER_NAME).handlers
    file_handler = next(h for h in handlers if isinstance(h, logging.handlers.RotatingFileHandler))

    assert file_handler.level == logging.DEBUG
    assert file_handler.maxBytes == settings.LOG_FILE_MAX_BYTES
    assert file_handler.backupCount == settings.LOG_FILE_BACKUPS
    assert file_handler.baseFilename.endswith(settings.LOG_FILE_NAME)
    assert logging.getLogger("apscheduler").level == logging.WARNING
