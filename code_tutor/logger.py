"""Logging configuration for Code Tutor.

Library modules log through the shared ``logger`` and never configure it.
Front ends call ``setup_logging()`` once to attach the file and console
handlers.
"""

import logging
import sys
from datetime import datetime

from code_tutor import config

LOGGER_NAME = "code_tutor"


def setup_logging() -> logging.Logger:
    """Set up logging to a dated file under LOG_DIR and, on a terminal, the console."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.LOG_LEVEL)

    # Replace handlers from an earlier setup
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    config.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = config.LOG_DIR / f"{datetime.now().strftime('%Y-%m-%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(config.LOG_LEVEL)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(file_handler)

    # Console handler (only when attached to a terminal)
    if sys.stdout is not None and sys.stdout.isatty():
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(config.LOG_LEVEL)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        logger.addHandler(console_handler)

    return logger


# Shared logger; silent until setup_logging() runs
logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())
