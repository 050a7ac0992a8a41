"""A backend-neutral logger facade that tolerates having no backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional


class Delegate(ABC):
    """A logging backend that a ``Logger`` forwards to."""

    @abstractmethod
    def info(self, ctx: Any, msg: str, *args: Any) -> None: ...

    @abstractmethod
    def warn(self, ctx: Any, msg: str, *args: Any) -> None: ...

    @abstractmethod
    def debug(self, ctx: Any, msg: str, *args: Any) -> None: ...

    @abstractmethod
    def error(self, ctx: Any, msg: str, *args: Any) -> None: ...

    @abstractmethod
    def with_fields(self, fields: Mapping[str, Any]) -> "Delegate": ...

    @abstractmethod
    def with_field(self, key: str, value: Any) -> "Delegate": ...

    @abstractmethod
    def with_error(self, err: BaseException) -> "Delegate": ...

    @abstractmethod
    def named(self, component: str) -> "Delegate": ...

    @abstractmethod
    def skip_callers(self, count: int) -> "Delegate": ...


@dataclass(frozen=True)
class Logger:
    """Unified logger; without a delegate every call is a no-op."""

    delegate: Optional[Delegate] = None

    def info(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.delegate is not None:
            self.delegate.skip_callers(2).info(ctx, msg, *args)

    def warn(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.delegate is not None:
            self.delegate.skip_callers(2).warn(ctx, msg, *args)

    def debug(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.delegate is not None:
            self.delegate.skip_callers(2).debug(ctx, msg, *args)

    def error(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.delegate is not None:
            self.delegate.skip_callers(2).error(ctx, msg, *args)

    def _derive(self, make: Callable[[Delegate], Delegate]) -> "Logger":
        if self.delegate is None:
            return self
        return Logger(make(self.delegate))

    def with_fields(self, fields: Mapping[str, Any]) -> "Logger":
        return self._derive(lambda d: d.with_fields(fields))

    def with_field(self, key: str, value: Any) -> "Logger":
        return self._derive(lambda d: d.with_field(key, value))

    def named(self, component: str) -> "Logger":
        return self._derive(lambda d: d.named(component))

    def skip_callers(self, count: int) -> "Logger":
        return self._derive(lambda d: d.skip_callers(count))

    def with_error(self, err: BaseException) -> "Logger":
        return self._derive(lambda d: d.with_error(err))


def decorate_named(name: str) -> Callable[[Optional[Logger]], Optional[Logger]]:
    """Return a decorator that names an optional logger, passing ``None`` through."""

    def decorate(logger: Optional[Logger]) -> Optional[Logger]:
        if logger is None:
            return None
        return logger.named(name)

    return decorate