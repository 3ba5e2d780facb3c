# backend/itineria/core/logger.py

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from itineria.core.config_loader import settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
DEFAULT_LOG_DIR = Path(__file__).resolve().parents[2] / "logs"


def setup_logger(log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Configure the application-wide `itineria` logger.

    The file handler rotates `app.log` (5 MB x 5) and records INFO and above;
    the console handler follows `settings.log_level`. Calling it again
    returns the already configured logger.
    """
    app_logger = logging.getLogger("itineria")
    if app_logger.handlers:
        return app_logger

    directory = Path(log_dir or settings.log_dir or DEFAULT_LOG_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(
        directory / "app.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel((level or settings.log_level).upper())

    app_logger.setLevel(logging.DEBUG)
    app_logger.addHandler(file_handler)
    app_logger.addHandler(console_handler)
    return app_logger


logger = setup_logger()
