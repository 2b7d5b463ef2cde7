"""Root logger configuration shared by the entry points."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Path | None = None) -> None:
    """Send log records to the console and, optionally, a rotating file.

    The file handler keeps 1 MB per file and two backups.
    """
    root = logging.getLogger()
    root.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)

    root.handlers.clear()
    root.addHandler(console)

    if log_file is not None:
        file_handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


__all__ = ["LOG_FORMAT", "setup_logging"]
