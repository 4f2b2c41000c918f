# === FILE: webqa/logger.py ===
"""Logging for WebQA: one ``WebQA`` logger, children per component.

Modules take a child via :func:`get_logger`; the CLI and the server call
:func:`init_logging` once to attach handlers to the root of that tree.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_ROOT_NAME: Final[str] = "WebQA"

# rotation for --log-file
_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _handlers(log_file: str | Path | None, fmt: str) -> List[logging.Handler]:
    # sys.stdout is looked up per call so click's CliRunner capture sees the output
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=_MAX_LOG_BYTES,
                backupCount=_LOG_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the ``WebQA`` logger.

    Output always goes to stdout; *log_file* adds a rotating file next to it.
    Records stop at ``WebQA`` and never reach the root logger.
    """
    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    for handler in _handlers(log_file, log_format):
        root.addHandler(handler)
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Component logger ``WebQA.<name>``."""
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


logger: logging.Logger = init_logging()

__all__ = ["DEFAULT_FORMAT", "logger", "init_logging", "get_logger"]
