from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

from utils.paths import LOG_DIR

_LOG_CONFIGURED = False

LOG_FILE = "poewatch.log"

FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | pid=%(process)d tid=%(threadName)s | %(message)s"
)


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Install the rotating file handler and console handler once per process."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        LOG_DIR / LOG_FILE, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FORMAT))

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(FORMAT))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    root.info("Log file: %s", file_handler.baseFilename)
    _LOG_CONFIGURED = True


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Return a logger configured for the application."""
    configure_logging(logging.INFO if level is None else level)
    return logging.getLogger(name)
