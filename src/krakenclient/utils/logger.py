"""Centralized logging configuration."""

import logging
import sys
from datetime import datetime

from .config import Config


class MicrosecondFormatter(logging.Formatter):
    """Formatter that keeps microsecond precision in timestamps.

    Example output:
        2024-01-15 14:23:45.123456 - krakenclient - INFO - [rest.py:42:connect] - Message here
    """

    def formatTime(self, record, datefmt=None):
        # Round once so a fraction just under one second carries into the seconds
        micros = round(record.created * 1_000_000)
        ct = datetime.fromtimestamp(micros // 1_000_000)
        s = ct.strftime(datefmt or "%Y-%m-%d %H:%M:%S")
        return f"{s}.{micros % 1_000_000:06d}"


def setup_logger(name: str = "krakenclient", level: str | None = None) -> logging.Logger:
    """Set up and return a configured logger."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = MicrosecondFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d:%(funcName)s] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO))

    return logger


logger = setup_logger()
