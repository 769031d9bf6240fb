"""Logging setup for the command line tools."""
from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

LOG_FILE = Path.home() / "logos-notes-sync.log"
LOGGER_NAME = "logos_notes"

FILE_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(
    log_file: Optional[Path] = LOG_FILE, verbose: bool = False, truncate: bool = True
) -> logging.Logger:
    """Attach console and file handlers to the package logger.

    With ``truncate`` the log file is started afresh; otherwise it is appended to.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            if truncate:
                with log_file.open("w", encoding="utf-8") as handle:
                    started = datetime.now(timezone.utc).isoformat(timespec="seconds")
                    handle.write(f"=== Logos Notes Sync Log ===\nStarted: {started}\n\n")
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to set up file logging at %s: %s", log_file, exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)

    return logger
