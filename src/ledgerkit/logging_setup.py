"""Logging setup for the ledgerkit CLI."""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that are too chatty at INFO
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
]


def setup_logging(level: int = logging.WARNING) -> logging.Logger:
    """Configure the ledgerkit logger with a single stderr handler.

    Calling this more than once replaces the previous handler instead of
    stacking a new one.

    Args:
        level: Level for ledgerkit loggers

    Returns:
        The configured "ledgerkit" logger
    """
    logger = logging.getLogger("ledgerkit")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
