"""Logger hierarchy shared by discovery, resolution and the sandbox service.

Modules ask for ``get_logger("discovery")`` and friends; the CLI calls
:func:`configure_logging` once per command to attach the console handler and,
with ``--log-file``, a timestamped file handler.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "storybox"
CONSOLE_FORMAT = "[storybox] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``storybox.<name>``, or the root storybox logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Send storybox records to stderr and, when ``log_file`` is given, to that file.

    Handlers from a previous call are closed first so repeated CLI runs in
    one process neither duplicate output nor leak file descriptors.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(sys.stderr), level, CONSOLE_FORMAT)

    if log_file is not None:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_path, encoding="utf-8"), level, FILE_FORMAT)
        logger.debug("Writing log records to %s", log_path)

    return logger


__all__ = ["configure_logging", "get_logger"]
