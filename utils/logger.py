from __future__ import annotations

import logging
import logging.config
from pathlib import Path

from rich.console import Console

LOG_FILE_NAME = "autoprops.log"


def configure_logging(log_dir: Path, level: str = "INFO") -> Path:
    """Configure a rotating file log and a rich console log."""

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            },
            "console": {
                "format": "%(message)s",
            },
        },
        "handlers": {
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filename": str(log_path),
                "maxBytes": 1_000_000,
                "backupCount": 3,
                "encoding": "utf-8",
            },
            "console": {
                "()": "rich.logging.RichHandler",
                "formatter": "console",
                "console": Console(stderr=True),
                "show_path": False,
            },
        },
        "loggers": {
            # inotify chatter from the observer thread
            "watchdog": {"level": "WARNING"},
        },
        "root": {
            "handlers": ["file", "console"],
            "level": level.upper(),
        },
    }

    logging.config.dictConfig(config)
    logging.getLogger(__name__).debug("Logging configured at %s", level)
    return log_path
