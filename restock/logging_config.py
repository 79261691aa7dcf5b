"""Logging configuration with rotation."""

from __future__ import annotations

import logging
import logging.handlers

from restock.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_MARK = "_restock_handler"


def setup_logging(settings: Settings) -> logging.Logger:
    """Configure the ``restock`` logger once per process.

    Sets up:
    - Console output at the configured level
    - Rotating file output (restock.log) under the data directory

    Streamlit re-executes scripts on every interaction, so handlers
    installed by an earlier run are detected and left in place.
    """
    logger = logging.getLogger("restock")
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    if any(getattr(h, _HANDLER_MARK, False) for h in logger.handlers):
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_MARK, True)
    logger.addHandler(console_handler)

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        filename=settings.log_dir / "restock.log",
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    setattr(file_handler, _HANDLER_MARK, True)
    logger.addHandler(file_handler)

    logger.info("Logging configured (level=%s, dir=%s)", settings.log_level, settings.log_dir)
    return logger
