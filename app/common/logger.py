"""Console logging for command-line tools."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV_VAR = "FACT_ENGINE_LOG_LEVEL"


def setup_logger(name: str, level: str | None = None) -> logging.Logger:
    """Configure and return a logger that renders through Rich on stderr."""
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel((level or os.getenv(LOG_LEVEL_ENV_VAR) or "INFO").upper())
    logger.propagate = False

    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get an existing console logger or create a new one."""
    return setup_logger(name)
