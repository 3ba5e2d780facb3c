import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from itineria.core.config_loader import settings
from itineria.core.logger import logger, setup_logger


def test_logger_writes_to_configured_directory():
    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert Path(file_handlers[0].baseFilename) == Path(settings.log_dir) / "app.log"
    assert file_handlers[0].level == logging.INFO


def test_setup_logger_does_not_duplicate_handlers():
    before = list(logger.handlers)
    assert setup_logger() is logger
    assert logger.handlers == before
