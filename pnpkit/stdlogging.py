"""Logging backend built on the standard library ``logging`` module."""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Mapping, Optional

from .environment import Environment
from .logger import Delegate, Logger

ContextFieldResolver = Callable[[Any], Optional[Mapping[str, Any]]]

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}


@dataclass(frozen=True)
class LogConfig:
    """Logging configuration read from ``LOG_LEVEL``."""

    log_level: str = "info"

    def level(self) -> int:
        """The ``logging`` level for the configured name; unknown names give INFO."""
        return _LEVELS.get(self.log_level.strip().lower(), logging.INFO)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LogConfig":
        source = os.environ if environ is None else environ
        return cls(log_level=source.get("LOG_LEVEL", "") or "info")


def _format(msg: str, args: tuple) -> str:
    return msg % args if args else msg


def _resolve(ctx: Any, resolvers: Iterable[ContextFieldResolver]) -> dict:
    resolved: dict = {}
    if ctx is None:
        return resolved
    for resolver in resolvers:
        resolved.update(resolver(ctx) or {})
    return resolved


@dataclass(frozen=True)
class LoggingDelegate(Delegate):
    """A ``Delegate`` writing to a ``logging.Logger`` with bound fields."""

    logger: logging.Logger
    name: str = ""
    fields: Mapping[str, Any] = field(default_factory=dict)
    stacklevel: int = 2
    context_field_resolvers: tuple = ()

    def _log(self, level: int, ctx: Any, msg: str, args: tuple) -> None:
        if not self.logger.isEnabledFor(level):
            return
        fields = dict(self.fields)
        fields.update(_resolve(ctx, self.context_field_resolvers))
        self.logger.log(
            level,
            _format(msg, args),
            extra={
                "fields": fields,
                "logger_name": self.name or self.logger.name,
                "context": ctx,
            },
            stacklevel=self.stacklevel,
        )

    def info(self, ctx: Any, msg: str, *args: Any) -> None:
        self._log(logging.INFO, ctx, msg, args)

    def warn(self, ctx: Any, msg: str, *args: Any) -> None:
        self._log(logging.WARNING, ctx, msg, args)

    def debug(self, ctx: Any, msg: str, *args: Any) -> None:
        self._log(logging.DEBUG, ctx, msg, args)

    def error(self, ctx: Any, msg: str, *args: Any) -> None:
        self._log(logging.ERROR, ctx, msg, args)

    def with_fields(self, fields: Mapping[str, Any]) -> "LoggingDelegate":
        return replace(self, fields={**self.fields, **fields})

    def with_field(self, key: str, value: Any) -> "LoggingDelegate":
        return replace(self, fields={**self.fields, key: value})

    def with_error(self, err: BaseException) -> "LoggingDelegate":
        return self.with_field("error", str(err))

    def named(self, component: str) -> "LoggingDelegate":
        current = self.name or self.logger.name
        return replace(self, name=f"{current}.{component}" if current else component)

    def skip_callers(self, count: int) -> "LoggingDelegate":
        return replace(self, stacklevel=self.stacklevel + count)


def new_logging_logger(
    logger: logging.Logger,
    context_field_resolvers: Iterable[ContextFieldResolver] = (),
) -> Logger:
    """Wrap a ``logging.Logger`` into the unified ``Logger``."""
    return Logger(
        LoggingDelegate(logger, context_field_resolvers=tuple(context_field_resolvers))
    )


class _Formatter(logging.Formatter):
    def __init__(self, structured: bool) -> None:
        super().__init__()
        self._structured = structured

    def format(self, record: logging.LogRecord) -> str:
        fields = getattr(record, "fields", None) or {}
        name = getattr(record, "logger_name", None) or record.name
        level = _LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        message = record.getMessage()
        if self._structured:
            entry = {"level": level, "ts": record.created, "logger": name, "msg": message}
            entry.update(fields)
            return json.dumps(entry, default=str)
        line = "\t".join((self.formatTime(record), level.upper(), name, message))
        if fields:
            line += "\t" + json.dumps(dict(fields), default=str)
        return line


class _ContextFieldFilter(logging.Filter):
    def __init__(self, resolvers: Iterable[ContextFieldResolver]) -> None:
        super().__init__()
        self._resolvers = tuple(resolvers)

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = getattr(record, "context", None)
        if ctx is not None and self._resolvers:
            fields = dict(getattr(record, "fields", None) or {})
            fields.update(_resolve(ctx, self._resolvers))
            record.fields = fields
        return True


def new_logger(
    config: LogConfig,
    environment: Optional[Environment] = None,
    context_field_resolvers: Iterable[ContextFieldResolver] = (),
) -> logging.Logger:
    """Build a logger writing to stderr: text in development, JSON lines otherwise."""
    development = environment is not None and Environment(environment).is_dev()
    logger = logging.Logger("pnpkit", config.level())
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_Formatter(structured=not development))
    handler.addFilter(_ContextFieldFilter(context_field_resolvers))
    logger.addHandler(handler)
    logger.propagate = False
    return logger