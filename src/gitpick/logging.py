"""Logging for an interactive tool: terse stderr, full DEBUG trail on disk."""

from __future__ import annotations

import logging as py_logging
import sys
from contextlib import suppress
from pathlib import Path
from typing import TextIO

LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
DEFAULT_LOG_PATH = Path("~/.config/gitpick/logs/gitpick.log")
_CWD_LOG_PATH = Path(".gitpick/logs/gitpick.log")

# stderr shares the terminal with fzf and git pagers, so keep it to one short line.
_STREAM_FORMAT = "gitpick: %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def normalize_level(level: str) -> str:
    """Upper-case a level name; WARNING is spelled WARN."""
    name = level.strip().upper()
    return "WARN" if name == "WARNING" else name


def _absolute(path: Path) -> Path:
    with suppress(RuntimeError):
        path = path.expanduser()
    return path if path.is_absolute() else path.resolve()


def default_log_path() -> Path:
    try:
        return DEFAULT_LOG_PATH.expanduser().resolve()
    except RuntimeError:
        # No resolvable home directory.
        return (Path.cwd() / _CWD_LOG_PATH).resolve()


def _file_handler(path: Path) -> py_logging.Handler | None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = py_logging.FileHandler(path, encoding="utf-8")
    except OSError:
        return None
    handler.setLevel(py_logging.DEBUG)
    handler.setFormatter(py_logging.Formatter(_FILE_FORMAT))
    return handler


def configure_logging(
    level: str = "WARN",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
) -> py_logging.Logger:
    console_level = LOG_LEVELS.get(normalize_level(level), py_logging.INFO)

    logger = py_logging.getLogger("gitpick")
    for previous in list(logger.handlers):
        logger.removeHandler(previous)
        previous.close()

    console = py_logging.StreamHandler(stream or sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(py_logging.Formatter(_STREAM_FORMAT))
    logger.addHandler(console)

    trail = _file_handler(_absolute(Path(log_file))) if log_file else None
    if trail is not None:
        logger.addHandler(trail)
        logger.setLevel(py_logging.DEBUG)
    else:
        logger.setLevel(console_level)

    logger.propagate = False
    return logger
