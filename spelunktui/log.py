"""File logging setup.

The TUI owns the terminal, so log records only ever go to a rotating file
under the platform log directory.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "spelunktui"
LOG_FILENAME = "spelunktui.log"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(level: str | int = logging.INFO, log_path: Path | None = None) -> Path:
    """Route all package loggers to a rotating log file and return its path."""
    path = default_log_path() if log_path is None else log_path
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "[%(levelname)s] %(asctime)s %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": {
                "file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "maxBytes": LOG_MAX_BYTES,
                    "backupCount": LOG_BACKUP_COUNT,
                    "filename": str(path),
                    "encoding": "utf-8",
                    "formatter": "default",
                    "level": level,
                }
            },
            "loggers": {
                "spelunktui": {"handlers": ["file"], "level": level, "propagate": False},
                "httpx": {"handlers": ["file"], "level": logging.WARNING, "propagate": False},
            },
        }
    )
    return path


__all__ = ["configure_logging", "default_log_path"]
