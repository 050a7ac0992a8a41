import threading

import pytest

from pnpkit.dbstats import DBStats, DBStatsPlugin, Gauge, PoolStats


class _FakeDB:
    def __init__(self, stats):
        self._stats = stats
        self.polled = threading.Event()

    def stats(self):
        self.polled.set()
        return self._stats


class _BrokenDB:
    def stats(self):
        raise OSError("connection gone")


def test_gauge_set_stores_float():
    gauge = Gauge("name", "help")
    gauge.set(7)
    assert gauge.value == 7.0
    assert isinstance(gauge.value, float)


def test_gauge_names_follow_source():
    names = [gauge.name for gauge in DBStats().collect()]
    assert names == [
        "gorm_dbstats_max_open_connections",
        "gorm_dbstats_open_connections",
        "gorm_dbstats_in_use",
        "gorm_dbstats_idle",
        "gorm_dbstats_wait_count",
        "gorm_dbstats_wait_duration",
        "gorm_dbstats_max_idle_closed",
        "gorm_dbstats_max_lifetime_closed",
        "gorm_dbstats_max_idletime_closed",
    ]


def test_fresh_gauges_are_zero():
    assert all(gauge.value == 0.0 for gauge in DBStats().collect())


def test_set_copies_counts():
    stats = PoolStats(
        max_open_connections=10,
        open_connections=4,
        in_use=3,
        idle=1,
        wait_count=5,
        max_idle_closed=6,
        max_lifetime_closed=8,
        max_idle_time_closed=9,
    )
    db_stats = DBStats()
    db_stats.set(stats)
    assert db_stats.max_open_connections.value == 10
    assert db_stats.open_connections.value == 4
    assert db_stats.in_use.value == 3
    assert db_stats.idle.value == 1
    assert db_stats.wait_count.value == 5
    assert db_stats.max_idle_closed.value == 6
    assert db_stats.max_lifetime_closed.value == 8
    assert db_stats.max_idle_time_closed.value == 9


def test_wait_duration_exported_in_nanoseconds():
    db_stats = DBStats()
    db_stats.set(PoolStats(wait_duration=1.5))
    assert db_stats.wait_duration.value == 1.5e9


def test_plugin_name():
    assert DBStatsPlugin(None, DBStats()).name == "pnpgormprometheus"


def test_run_without_db_raises():
    plugin = DBStatsPlugin(None, DBStats())
    with pytest.raises(RuntimeError, match="db is not initialized"):
        plugin.run()


def test_run_polls_until_closed():
    db_stats = DBStats()
    db = _FakeDB(PoolStats(open_connections=12, in_use=2))
    plugin = DBStatsPlugin(None, db_stats, interval=0.01)
    plugin.initialize(db)
    errors = []

    def target():
        try:
            plugin.run()
        except Exception as exc:
            errors.append(exc)

    thread = threading.Thread(target=target)
    thread.start()
    assert db.polled.wait(5)
    plugin.close()
    thread.join(5)
    assert not thread.is_alive()
    assert errors == []
    assert db_stats.open_connections.value == 12
    assert db_stats.in_use.value == 2


def test_run_wraps_db_errors():
    plugin = DBStatsPlugin(None, DBStats(), interval=0.01)
    plugin.initialize(_BrokenDB())
    with pytest.raises(RuntimeError, match="can't get underlying db") as info:
        plugin.run()
    assert isinstance(info.value.__cause__, OSError)


def test_close_without_run_times_out():
    plugin = DBStatsPlugin(None, DBStats(), close_timeout=0.05)
    with pytest.raises(TimeoutError, match="timeout"):
        plugin.close()


def test_timed_out_close_does_not_stop_later_run():
    db_stats = DBStats()
    db = _FakeDB(PoolStats(idle=3))
    plugin = DBStatsPlugin(None, db_stats, interval=0.01, close_timeout=0.05)
    plugin.initialize(db)
    with pytest.raises(TimeoutError):
        plugin.close()
    plugin.close_timeout = 5
    thread = threading.Thread(target=plugin.run)
    thread.start()
    assert db.polled.wait(5)
    plugin.close()
    thread.join(5)
    assert not thread.is_alive()
    assert db_stats.idle.value == 3