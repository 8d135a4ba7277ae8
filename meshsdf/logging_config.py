"""
Logging Configuration
Sets up handlers for the meshsdf and kdindex loggers.

Library modules only create loggers; nothing is printed until an
application calls :func:`setup_logging`.
"""
import logging
import sys
from typing import Optional

from .config import LOG_DATEFMT, LOG_FORMAT

NAMESPACES = ("meshsdf", "kdindex")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the 'meshsdf' and 'kdindex' namespace loggers.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    for name in NAMESPACES:
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Avoid duplicate handlers when called more than once
        if logger.hasHandlers():
            logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logging.getLogger("meshsdf").info("Logging initialized.")
