"""Connection pool gauges and a background collector that keeps them current."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from .logger import Logger


@dataclass(frozen=True)
class PoolStats:
    """A snapshot of a connection pool; ``wait_duration`` is in seconds."""

    max_open_connections: int = 0
    open_connections: int = 0
    in_use: int = 0
    idle: int = 0
    wait_count: int = 0
    wait_duration: float = 0.0
    max_idle_closed: int = 0
    max_lifetime_closed: int = 0
    max_idle_time_closed: int = 0


@dataclass
class Gauge:
    """A named metric holding one float value."""

    name: str
    help: str
    value: float = 0.0

    def set(self, value: float) -> None:
        self.value = float(value)


class DBStats:
    """The pool gauges exported for a database."""

    def __init__(self) -> None:
        self.max_open_connections = Gauge(
            "gorm_dbstats_max_open_connections",
            "Maximum number of open connections to the database.",
        )
        self.open_connections = Gauge(
            "gorm_dbstats_open_connections",
            "The number of established connections both in use and idle.",
        )
        self.in_use = Gauge(
            "gorm_dbstats_in_use", "The number of connections currently in use."
        )
        self.idle = Gauge("gorm_dbstats_idle", "The number of idle connections.")
        self.wait_count = Gauge(
            "gorm_dbstats_wait_count", "The total number of connections waited for."
        )
        self.wait_duration = Gauge(
            "gorm_dbstats_wait_duration",
            "The total time blocked waiting for a new connection.",
        )
        self.max_idle_closed = Gauge(
            "gorm_dbstats_max_idle_closed",
            "The total number of connections closed due to SetMaxIdleConns.",
        )
        self.max_lifetime_closed = Gauge(
            "gorm_dbstats_max_lifetime_closed",
            "The total number of connections closed due to SetConnMaxLifetime.",
        )
        self.max_idle_time_closed = Gauge(
            "gorm_dbstats_max_idletime_closed",
            "The total number of connections closed due to SetConnMaxIdleTime.",
        )

    def set(self, stats: PoolStats) -> None:
        """Copy a pool snapshot into the gauges; the wait duration is exported in nanoseconds."""
        self.max_open_connections.set(stats.max_open_connections)
        self.open_connections.set(stats.open_connections)
        self.in_use.set(stats.in_use)
        self.idle.set(stats.idle)
        self.wait_count.set(stats.wait_count)
        self.wait_duration.set(stats.wait_duration * 1e9)
        self.max_idle_closed.set(stats.max_idle_closed)
        self.max_lifetime_closed.set(stats.max_lifetime_closed)
        self.max_idle_time_closed.set(stats.max_idle_time_closed)

    def collect(self) -> list[Gauge]:
        """All gauges, in a fixed order."""
        return [
            self.max_open_connections,
            self.open_connections,
            self.in_use,
            self.idle,
            self.wait_count,
            self.wait_duration,
            self.max_idle_closed,
            self.max_lifetime_closed,
            self.max_idle_time_closed,
        ]


class StatsSource(Protocol):
    """A database handle that can report its pool statistics."""

    def stats(self) -> PoolStats: ...


class DBStatsPlugin:
    """Polls a database's pool statistics into ``DBStats`` until closed."""

    name = "pnpgormprometheus"

    def __init__(
        self,
        logger: Optional[Logger],
        db_stats: DBStats,
        interval: float = 1.0,
        close_timeout: float = 3.0,
    ) -> None:
        self.logger = logger if logger is not None else Logger()
        self.db_stats = db_stats
        self.interval = interval
        self.close_timeout = close_timeout
        self.db: Optional[StatsSource] = None
        self._lock = threading.Lock()
        self._quit = threading.Event()
        self._acknowledged = threading.Event()

    def initialize(self, db: StatsSource) -> None:
        """Attach the database to poll."""
        self.db = db

    def run(self) -> None:
        """Update the gauges once per interval until ``close`` is called."""
        if self.db is None:
            raise RuntimeError("db is not initialized")
        while True:
            if self._quit.wait(self.interval):
                with self._lock:
                    if self._quit.is_set():
                        self._quit.clear()
                        self._acknowledged.set()
                        return
                continue
            try:
                stats = self.db.stats()
            except Exception as exc:
                raise RuntimeError(f"can't get underlying db: {exc}") from exc
            self.db_stats.set(stats)

    def close(self) -> None:
        """Stop a running ``run``; raise ``TimeoutError`` if none answers in time."""
        with self._lock:
            self._acknowledged.clear()
            self._quit.set()
        if self._acknowledged.wait(self.close_timeout):
            return
        with self._lock:
            if self._acknowledged.is_set():
                return
            self._quit.clear()
        raise TimeoutError("can't close db stats plugin: timeout")


def _describe(gauge: Gauge) -> dict[str, Any]:
    return {"name": gauge.name, "help": gauge.help}