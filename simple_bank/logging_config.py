"""
Logging configuration for simple-bank.

Creates a rotating file-based service logger under LOG_DIR (default ./logs).
"""

import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

from simple_bank import config

SERVICE_LOGGER = "simple_bank"
LOG_FILE_NAME = "simple_bank.log"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def _setup_file_logger(name: str, log_file: Path, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    # Avoid duplicate handlers if setup_logging is called multiple times
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    return logger


def setup_logging(log_dir: Optional[Path] = None, log_level: Optional[str] = None) -> logging.Logger:
    """
    Configure root + service loggers for simple-bank.

    Returns the service logger so callers can log the effective settings.
    """
    log_dir = Path(log_dir) if log_dir is not None else config.LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, (log_level or config.LOG_LEVEL).upper(), logging.INFO)

    # Root logger
    logging.getLogger().setLevel(level)

    service_logger = _setup_file_logger(SERVICE_LOGGER, log_dir / LOG_FILE_NAME, level)

    # Keep SQLAlchemy logs informative but not too noisy
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if config.DB_ECHO else logging.WARNING)
    return service_logger


def get_logger(name: str) -> logging.Logger:
    """
    Convenience wrapper to get a named logger.
    """
    return logging.getLogger(name)
