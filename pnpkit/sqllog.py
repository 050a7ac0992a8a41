"""A level-filtered query logger that forwards to the unified ``Logger``."""

from __future__ import annotations

import threading
import time
from enum import IntEnum
from typing import Any, Callable, Optional, Tuple

from .logger import Logger


class LogLevel(IntEnum):
    """Verbosity of the query logger; higher lets more through."""

    SILENT = 1
    ERROR = 2
    WARN = 3
    INFO = 4


class QueryLogger:
    """Logs database messages at or below the configured level, and every query trace."""

    def __init__(
        self, delegate: Optional[Logger] = None, level: LogLevel = LogLevel.SILENT
    ) -> None:
        self.delegate = delegate if delegate is not None else Logger()
        self._lock = threading.RLock()
        self._level = LogLevel(level)

    @property
    def level(self) -> LogLevel:
        with self._lock:
            return self._level

    def log_mode(self, level: LogLevel) -> "QueryLogger":
        """Set the level and return this logger."""
        with self._lock:
            self._level = LogLevel(level)
        return self

    def info(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.level >= LogLevel.INFO:
            self.delegate.info(ctx, msg, *args)

    def warn(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.level >= LogLevel.WARN:
            self.delegate.warn(ctx, msg, *args)

    def error(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.level >= LogLevel.ERROR:
            self.delegate.error(ctx, msg, *args)

    def trace(
        self,
        ctx: Any,
        begin: float,
        fc: Callable[[], Tuple[str, int]],
        err: Optional[BaseException],
    ) -> None:
        """Log a query at debug level; ``begin`` is a ``time.monotonic()`` reading."""
        sql, rows = fc()
        elapsed = time.monotonic() - begin
        self.delegate.with_fields(
            {"sql": sql, "rows_affected": rows, "elapsed": elapsed}
        ).debug(ctx, "sql query")