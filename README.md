# pnpkit

Small, independent building blocks for assembling services: a logging facade with a
standard-library backend, environment name detection, TLS contexts, JWT signing keys,
message middleware chains and connection pool gauges.

## Installation

```
pip install pnpkit
```

To run the test suite:

```
pip install "pnpkit[test]"
pytest
```

## Modules

### `pnpkit.options`

`apply_options(target, *opts)` calls each option with `target`, in order, and returns
`target`.

### `pnpkit.ordering`

`ordered(order, value)` builds an `OrderedItem`. `OrderedItems` is a list of them;
`OrderedItems.get()` sorts the list in place by `order` and returns the values.

### `pnpkit.logger`

`Logger` forwards to any `Delegate` (an abstract base with `info`, `warn`, `debug`,
`error`, `with_fields`, `with_field`, `with_error`, `named` and `skip_callers`). A
`Logger()` without a delegate does nothing, so a logger can always be passed around even
when no backend is configured. `decorate_named(name)` returns a function that names a
logger and passes `None` through unchanged.

### `pnpkit.environment`

`Environment` is a `str` with case- and whitespace-insensitive checks:
`is_one_of_ci(*names)`, `is_dev()` (`dev`, `deveopment`, `d`), `is_prod()` (`prod`,
`production`, `p`, `prd`) and `is_test()` (`test`, `t`, `tst`).
`EnvironmentConfig.from_env(environ)` reads `ENVIRONMENT` (unset or empty gives
`development`); `new_environment(config)` returns its environment.

### `pnpkit.stdlogging`

- `LogConfig.from_env(environ)` reads `LOG_LEVEL` (default `info`); `LogConfig.level()`
  maps `debug`, `info`, `warn` and `error` to `logging` levels, anything else to INFO.
- `new_logger(config, environment, context_field_resolvers)` builds a `logging.Logger`
  writing to stderr: tab-separated text when the environment is a development one, JSON
  lines otherwise.
- `new_logging_logger(logger, context_field_resolvers)` wraps a `logging.Logger` in a
  `Logger` through `LoggingDelegate`, which keeps bound fields, a dotted component name
  and the caller stack level. Messages are %-formatted with their arguments.
- A context field resolver is a callable taking the call context and returning a mapping
  (or `None`); its fields are added to every record logged with a non-`None` context.

### `pnpkit.sqllog`

`QueryLogger(delegate, level)` passes `info`, `warn` and `error` messages to a `Logger`
when the `LogLevel` (`SILENT`, `ERROR`, `WARN`, `INFO`; default `SILENT`) allows them.
`log_mode(level)` changes the level and returns the logger. `trace(ctx, begin, fc, err)`
always logs a debug `sql query` record with `sql`, `rows_affected` and `elapsed`
(seconds since the `time.monotonic()` reading `begin`).

### `pnpkit.messaging`

- `NatsConfig` (address, `ReconnectConfig`) and `NatsConfig.reconnect_options()`, which
  returns `reconnect_time_wait` and `max_reconnect_attempts` keyword arguments, or
  `allow_reconnect=False` when reconnects are disabled.
- `run_middlewares(ctx, msg, handler, middlewares)` runs each middleware in order; a
  middleware receives `(ctx, msg, next)` and calls `next(ctx, msg)` to continue.
- `build_subscriptions(subscriptions, middlewares, options)` turns `Subscription`s into
  `BoundSubscription`s with the shared middlewares before each subscription's own, and
  the shared options overridden by the subscription's. `BoundSubscription.deliver(msg)`
  runs the chain with a `None` context.

### `pnpkit.tlsconfig`

`ClientTLSConfig.ssl_context()` and `ServerTLSConfig.ssl_context()` return `None` when
disabled, otherwise an `ssl.SSLContext` with the certificate and key loaded and, if
given, the `;`-separated CA files (optionally together with the system CAs). The server
`client_auth` accepts the `ClientAuth` values `request_client_cert`,
`require_any_client_cert`, `verify_client_cert_if_given` and
`require_and_verify_client_cert`, or an empty string for none. Failures raise
`TLSConfigError`.

### `pnpkit.jwtkeys`

`JWTConfig.from_env(environ, prefix="JWT_")` reads `<prefix>SIGNING_METHOD` and
`<prefix>SIGNING_KEY` and raises `ValueError` if either is empty.
`new_sign_params(config)` returns `SignParams(method, signing_key)`:

- `HS256`/`HS384`/`HS512`: the key text as UTF-8 bytes;
- `RS*` and `PS*`: a PKCS #1 RSA private key from PEM;
- `ES*`: a SEC 1 EC private key from PEM;
- `EdDSA`: the raw bytes of the PEM block.

Any other method, or a key that cannot be loaded, raises `SigningKeyError`.

### `pnpkit.dbstats`

`DBStats` holds nine `Gauge`s for pool statistics; `set(PoolStats)` copies a snapshot in
(the wait duration is stored in nanoseconds) and `collect()` lists the gauges.
`DBStatsPlugin(logger, db_stats)` is given a database with `initialize(db)`, where `db`
has a `stats()` method returning `PoolStats`; `run()` updates the gauges every second
until `close()` stops it, and `close()` raises `TimeoutError` if no `run()` answers within
three seconds.

## Example

```python
from pnpkit.environment import EnvironmentConfig, new_environment
from pnpkit.stdlogging import LogConfig, new_logger, new_logging_logger

environ = {"ENVIRONMENT": "dev", "LOG_LEVEL": "debug"}
env = new_environment(EnvironmentConfig.from_env(environ))

std_logger = new_logger(LogConfig.from_env(environ), env, [])
logger = new_logging_logger(std_logger, [])
logger.named("worker").with_field("job", "cleanup").info(None, "started %d tasks", 3)
```

## What it does not do

pnpkit has no dependency-injection container or application lifecycle, and no command
line. It does not connect to a message server, a database or a metrics endpoint: it
gives the settings, middleware chains, gauges and loggers that such code would use. It
loads JWT signing keys but does not issue or verify tokens.