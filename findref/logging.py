"""Logging setup for the findref CLI, scanner and service.

Everything logs under the ``findref`` hierarchy. The single-file engine
(``findref.engine`` and ``findref.parsing.*``) only ever emits DEBUG records,
one or more per analysed file, so it is kept quiet unless ``verbose`` is set;
the orchestration layers (scanner, git, orchestrator) still reach the file sink
at DEBUG when one is configured.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

_LOGGER_NAME = "findref"
CORE_LOGGERS: Tuple[str, ...] = ("engine", "parsing")

_CONSOLE_FORMAT = "[findref] %(levelname)s %(message)s"
_VERBOSE_CONSOLE_FORMAT = "[findref] %(levelname)s %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the findref hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _set_core_level(level: int) -> None:
    for name in CORE_LOGGERS:
        get_logger(name).setLevel(level)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler and, with ``log_file``, a DEBUG file sink.

    ``verbose`` lowers the console to DEBUG, names the emitting logger in each
    line and lets the core engine trace every file it analyses.
    """
    console_level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose or log_file is not None else logging.INFO)
    logger.propagate = False
    _set_core_level(logging.DEBUG if verbose else logging.INFO)

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(console_level)
    stream_handler.setFormatter(
        logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT)
    )
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["CORE_LOGGERS", "configure_logging", "get_logger"]
