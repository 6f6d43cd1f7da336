"""
Logger helpers.

Every module asks for a named logger under the ``compblocks`` namespace; the
application factory configures the namespace handlers once.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "compblocks"

_FORMATTER = logging.Formatter(
    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``compblocks`` logger (``get_logger(__name__)``)."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(level: str | int = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Attach console (and optional file) handlers to the namespace logger.

    Calling it again only updates the level; handlers are added once.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_FORMATTER)
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(Path(log_file), mode="a", encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not open log file %s: %s", log_file, exc)
        else:
            file_handler.setFormatter(_FORMATTER)
            logger.addHandler(file_handler)

    return logger
