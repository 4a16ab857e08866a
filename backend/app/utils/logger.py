"""
Gym Roster — Logging Configuration
"""

import logging
import os
import sys


def setup_logger(name: str = "gym-roster", level: str | None = None) -> logging.Logger:
    """Create a configured logger with console output."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
        logger.setLevel(level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)

        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


# Global logger instance
logger = setup_logger()
