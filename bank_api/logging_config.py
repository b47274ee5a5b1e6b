"""
Logging configuration for the Bank API.

Call setup_logging() once at startup. Every module then logs through
logging.getLogger(__name__), so all records land under the "bank_api"
logger hierarchy and share one format.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from bank_api.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def setup_logging(level: str | None = None, log_file: str | None = None) -> logging.Logger:
    """
    Configure the "bank_api" logger with a console handler and, optionally,
    a rotating file handler.

    Safe to call more than once: existing handlers are replaced, not stacked.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    log_file = log_file or settings.LOG_FILE

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    logger = logging.getLogger("bank_api")
    logger.setLevel(log_level)
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # SQL statements are only interesting while debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )

    return logger
