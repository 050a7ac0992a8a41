"""Messaging connection settings and subscription middleware chains."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

Handler = Callable[[Any, Any], None]
Middleware = Callable[[Any, Any, Handler], None]


@dataclass(frozen=True)
class ReconnectConfig:
    """Reconnect policy; ``wait`` is in seconds and ``max`` of -1 means unlimited."""

    max: int = -1
    allow: bool = True
    wait: float = 0.5


@dataclass(frozen=True)
class NatsConfig:
    """Connection settings for the message server."""

    addr: str = "127.0.0.1:443"
    reconnects: ReconnectConfig = field(default_factory=ReconnectConfig)

    def reconnect_options(self) -> dict:
        """Client connect keyword arguments for the reconnect policy."""
        if self.reconnects.allow:
            return {
                "reconnect_time_wait": self.reconnects.wait,
                "max_reconnect_attempts": self.reconnects.max,
            }
        return {"allow_reconnect": False}


def _step(middleware: Middleware, following: Handler, ctx: Any, msg: Any) -> None:
    middleware(ctx, msg, following)


def run_middlewares(
    ctx: Any, msg: Any, handler: Handler, middlewares: Sequence[Middleware]
) -> None:
    """Run ``middlewares`` in order, each passing control on to the next, then ``handler``."""
    chain: Handler = handler
    for middleware in reversed(list(middlewares)):
        chain = partial(_step, middleware, chain)
    chain(ctx, msg)


@dataclass(frozen=True)
class Subscription:
    """A subject with its handler and the middlewares and options of its own."""

    subject: str
    handler: Handler
    middlewares: Sequence[Middleware] = ()
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BoundSubscription:
    """A subscription with shared middlewares and options merged in."""

    subject: str
    handler: Handler
    middlewares: tuple
    options: Mapping[str, Any]

    def deliver(self, msg: Any) -> None:
        """Pass a received message through the middleware chain to the handler."""
        run_middlewares(None, msg, self.handler, self.middlewares)


def build_subscriptions(
    subscriptions: Iterable[Subscription],
    middlewares: Sequence[Middleware] = (),
    options: Optional[Mapping[str, Any]] = None,
) -> list[BoundSubscription]:
    """Bind each subscription with the shared middlewares first and its own after."""
    shared_options = dict(options or {})
    return [
        BoundSubscription(
            subject=sub.subject,
            handler=sub.handler,
            middlewares=(*middlewares, *sub.middlewares),
            options={**shared_options, **sub.options},
        )
        for sub in subscriptions
    ]