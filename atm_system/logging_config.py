"""Logging configuration for the ATM system."""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", stream=None) -> None:
    """
    Configure the root logger with a single stream handler.

    The console terminal writes its own output to stdout, so
    by default log records go to stderr to keep the two apart.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)

    logging.getLogger("atm_system").setLevel(log_level)

    # SQL echo is noisy even at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
