"""Tests for logging setup."""

from __future__ import annotations

import logging
import logging.handlers

import pytest

from restock.config import build_settings
from restock.logging_config import setup_logging


@pytest.fixture
def restock_logger():
    logger = logging.getLogger("restock")
    saved, level = list(logger.handlers), logger.level
    logger.handlers = []
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers = saved
    logger.setLevel(level)


def test_setup_adds_console_and_rotating_file(tmp_path, restock_logger):
    settings = build_settings(tmp_path)
    logger = setup_logging(settings)
    assert logger is restock_logger
    kinds = {type(h) for h in logger.handlers}
    assert logging.handlers.RotatingFileHandler in kinds
    assert logging.StreamHandler in kinds
    rotating = next(h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler))
    assert rotating.maxBytes == 5 * 1024 * 1024
    assert rotating.backupCount == 5
    assert (settings.log_dir / "restock.log").exists()


def test_setup_is_idempotent(tmp_path, restock_logger):
    settings = build_settings(tmp_path)
    setup_logging(settings)
    setup_logging(settings)
    assert len(restock_logger.handlers) == 2


def test_level_follows_settings(tmp_path, restock_logger, monkeypatch):
    monkeypatch.setenv("RESTOCK_LOG_LEVEL", "warning")
    setup_logging(build_settings(tmp_path))
    assert restock_logger.level == logging.WARNING
