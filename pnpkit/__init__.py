"""Building blocks for services: logging facade and backend, environment names, TLS contexts, JWT signing keys, messaging middleware and DB pool gauges."""

__version__ = "0.1.0"

__all__ = [
    "dbstats",
    "environment",
    "jwtkeys",
    "logger",
    "messaging",
    "options",
    "ordering",
    "sqllog",
    "stdlogging",
    "tlsconfig",
]