# src/homebase/logging_setup.py

"""Logging for the console app: a quiet stderr stream plus a full homebase.log."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "homebase.log"

_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Decides what reaches the REPL's stderr.

    Storage adapters log every get/set at DEBUG, so they only show from
    WARNING. Other packages (and captured `warnings`) only show errors.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("homebase.storage."):
            return record.levelno >= logging.WARNING
        if name.startswith("homebase."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/homebase",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Replace root handlers with a filtered console handler and a file handler.

    Returns the log file path. Meant to run once from main() before any
    component logs.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
