"""
Logging utilities for EduResult.

Each component logs to stdout and to its own dated file under LOGS_DIR.
"""
import logging
import sys
from datetime import date
from typing import Optional

from ..config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def daily_log_file(component: str, day: Optional[date] = None) -> str:
    """File name for a component's log, e.g. ``store_20240131.log``"""
    return f"{component}_{(day or date.today()):%Y%m%d}.log"


def setup_logger(name: str, log_file: str = None, level: int = None) -> logging.Logger:
    """
    Configure a named logger once.

    Args:
        name: Logger name
        log_file: File name inside LOGS_DIR; console only when omitted
        level: Defaults to DEBUG when settings.DEBUG is on, else INFO
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if level is None:
        level = logging.DEBUG if settings.DEBUG else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(settings.LOGS_DIR / log_file, encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


store_logger = setup_logger('store', daily_log_file('store'))
extraction_logger = setup_logger('extraction', daily_log_file('extraction'))
