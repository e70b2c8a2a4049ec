"""Logging for the ``pixelforge`` command line.

Console output always goes to stderr so that metadata written to stdout stays
machine readable. ``Settings.log_file`` adds a second, persistent copy of the
same records. APScheduler announces every playback tick at INFO, so its
loggers are held at WARNING unless debug output was requested.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
QUIET_LOGGERS = ("apscheduler",)


def _open_log_file(log_file: Union[str, Path]) -> tuple[Optional[logging.Handler], Optional[str]]:
    log_path = Path(log_file).expanduser()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path, encoding="utf-8"), None
    except OSError as exc:
        return None, f"Logging to console only; cannot open '{log_path}': {exc}"


def configure_logging(
    *,
    level: int = logging.INFO,
    log_file: Union[str, Path, None] = None,
    include_stream: bool = True,
) -> logging.Logger:
    """Install the console and optional file handlers on the root logger.

    An unwritable ``log_file`` is reported once through the returned logger
    and playback or analysis carries on with console output only.
    """
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    if include_stream:
        handlers.append(logging.StreamHandler(sys.stderr))

    problem: Optional[str] = None
    if log_file:
        file_handler, problem = _open_log_file(log_file)
        if file_handler is not None:
            handlers.append(file_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    quiet_level = level if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logger = logging.getLogger("pixelforge")
    logger.setLevel(level)
    if problem:
        logger.warning(problem)
    return logger


__all__ = ["configure_logging"]
