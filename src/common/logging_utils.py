"""Centralized logging helpers.

Every module obtains its own ``logging.getLogger(__name__)``; this module
configures the root handler once and provides the structured ``extra``
payload used by DEBUG traces.
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

_CONFIGURED = False


def _level_from_env() -> int:
    name = os.environ.get(Constants.ENV_LOG_LEVEL, "INFO").strip().upper()
    if name not in Constants.LOG_LEVELS:
        return logging.INFO
    return getattr(logging, name)


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger.

    Args:
        level: Optional level name; falls back to MODGRAPH_LOG_LEVEL, then INFO.
        log_file: Optional path; when given, records go to this file instead of stderr.
    """
    global _CONFIGURED  # pylint: disable=global-statement
    root = logging.getLogger()
    if _CONFIGURED:
        for handler in list(root.handlers):
            root.removeHandler(handler)

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(handler)

    if level and level.upper() in Constants.LOG_LEVELS:
        root.setLevel(getattr(logging, level.upper()))
    else:
        root.setLevel(_level_from_env())
    _CONFIGURED = True


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records of this logger would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping for structured log records.

    None values are dropped so handlers only see populated fields.
    """
    return {k: v for k, v in kwargs.items() if v is not None}


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
