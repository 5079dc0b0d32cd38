"""Application logging helpers."""

from __future__ import annotations

import logging as py_logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TextIO

LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "WARNING": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
DEFAULT_LOG_PATH = Path("~/.config/cmdlaunch/logs/cmdlaunch.log")
_FALLBACK_LOG_PATH = Path(".cmdlaunch/logs/cmdlaunch.log")
_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"
LOG_FILE_MAX_BYTES = 1_000_000
LOG_FILE_BACKUPS = 3


def _absolute(path: Path) -> Path:
    try:
        path = path.expanduser()
    except RuntimeError:
        # No resolvable home directory.
        return (Path.cwd() / _FALLBACK_LOG_PATH).resolve()
    return path if path.is_absolute() else path.resolve()


def default_log_path() -> Path:
    return _absolute(DEFAULT_LOG_PATH)


def _file_handler(log_file: str | Path, formatter: py_logging.Formatter) -> py_logging.Handler | None:
    """Rotating DEBUG handler, or ``None`` when the location is not writable."""
    log_path = _absolute(Path(log_file))
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
    except OSError:
        return None
    handler.setLevel(py_logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: str = "INFO",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
    console: bool = True,
) -> py_logging.Logger:
    """Reset the ``cmdlaunch`` logger.

    ``console=False`` drops the stream handler; the curses screen owns the
    terminal while the UI runs, so records then go to the log file only.
    """
    normalized = level.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    resolved = LOG_LEVELS.get(normalized, py_logging.INFO)

    logger = py_logging.getLogger("cmdlaunch")
    logger.setLevel(resolved)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    formatter = py_logging.Formatter(_FORMAT)

    if console:
        stream_handler = py_logging.StreamHandler(stream or sys.stderr)
        stream_handler.setLevel(resolved)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
    else:
        logger.addHandler(py_logging.NullHandler())

    if log_file:
        file_handler = _file_handler(log_file, formatter)
        if file_handler is not None:
            logger.addHandler(file_handler)

    logger.propagate = False
    return logger
