"""Logging helpers shared by the umldoc CLI, service and pipeline."""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LOGGER_NAME = "umldoc"
_LEVEL_ENV = "UMLDOC_LOG_LEVEL"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger nested under the ``umldoc`` namespace."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _resolve_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    override = os.getenv(_LEVEL_ENV, "").strip().upper()
    if override and isinstance(logging.getLevelName(override), int):
        return logging.getLevelName(override)
    return logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Install console (and optional file) handlers on the umldoc logger.

    ``verbose`` wins over ``quiet``. Without either flag the level can be
    overridden through ``UMLDOC_LOG_LEVEL``.
    """
    level = _resolve_level(verbose, quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Drop handlers from an earlier call so repeated CLI runs don't duplicate lines.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[umldoc] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
