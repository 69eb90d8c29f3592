"""Tests for logging setup."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

from tooldir.config.models import LoggingSettings
from tooldir.logging_config import configure_logging


def test_configure_logging_installs_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "tooldir.log"

    configure_logging(LoggingSettings(level="debug", file=str(log_file)))
    logging.getLogger("tooldir.catalog.store").debug("hello from the store")

    logger = logging.getLogger("tooldir")
    assert logger.level == logging.DEBUG
    assert any(isinstance(handler, RichHandler) for handler in logger.handlers)
    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert "hello from the store" in log_file.read_text(encoding="utf-8")


def test_configure_logging_replaces_previous_handlers() -> None:
    configure_logging(LoggingSettings())
    configure_logging(LoggingSettings(level="nonsense"))

    logger = logging.getLogger("tooldir")
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
