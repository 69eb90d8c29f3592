"""Logging setup shared by the CLI entry points."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from tooldir.config.models import LoggingSettings

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: LoggingSettings, *, console: Console | None = None) -> None:
    """Attach console and optional rotating-file handlers to the ``tooldir`` logger.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        settings: Logging section of the loaded configuration.
        console: Console used by the rich handler; defaults to stderr.
    """
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    logger = logging.getLogger("tooldir")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    logger.propagate = False

    logger.addHandler(
        RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
    )

    if settings.file:
        path = Path(settings.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
            backupCount=max(0, settings.backup_count),
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(file_handler)


__all__ = ["configure_logging"]
