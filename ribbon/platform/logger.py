import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ribbon.platform.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "ribbon.log"

_file_handler: Optional[RotatingFileHandler] = None


def _shared_file_handler(formatter: logging.Formatter) -> RotatingFileHandler:
    """One rotating file per process, shared by every named logger."""
    global _file_handler
    if _file_handler is None:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        _file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME, maxBytes=10_000_000, backupCount=5, encoding="utf-8"
        )
        _file_handler.setFormatter(formatter)
    return _file_handler


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a ribbon module, writing to the console and to
    `<LOG_DIR>/ribbon.log` at `LOG_LEVEL`.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    logger.setLevel(level)
    # Handled here only, not again by the root logger
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)

    logger.addHandler(_shared_file_handler(formatter))
    logger.addHandler(console)
    return logger
