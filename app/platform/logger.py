import logging
import os
from logging.handlers import RotatingFileHandler

from app.platform.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _log_file_path() -> str:
    log_dir = os.path.join(os.getcwd(), settings.LOG_DIR)
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)
    return os.path.join(log_dir, "a11y_crawler.log")


def get_logger(name: str) -> logging.Logger:
    """
    Creates a logger instance that writes to console AND a rotating file.
    Repeated calls with the same name return the already configured logger.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    level = logging.DEBUG if settings.DEBUG else logging.INFO
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(_log_file_path(), maxBytes=10_000_000, backupCount=5)
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    # handlers are attached here; don't duplicate records through the root logger
    logger.propagate = False

    return logger
