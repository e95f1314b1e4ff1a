# zappkit

Reusable building blocks for application frameworks:

- `zappkit.compactor` – pluggable compression (`raw`, `gzip`, `zstd`) for streams and bytes
- `zappkit.serializer` – pluggable serialization (`base`, `bytes`, `json`, `msgpack`, `yaml`, and more names backed by JSON)
- `zappkit.lumberjack` – `RollingFile`, a size-bounded file writer with timestamped backups, age and count limits and optional gzip compression
- `zappkit.zlog` – leveled loggers with fields, session ids, colour hooks and interceptors
- `zappkit.logger` – a process-wide logger with module-level shortcuts
- `zappkit.depender` – start items after the items they depend on, close them in reverse
- `zappkit.registry` – lifecycle handlers and named creator registries for plugins and services
- `zappkit.utils` – wildcard matching, zero-value checks, error-capturing calls and threaded fan-out

## Installation

```
pip install zappkit
```

## Compression

```python
from zappkit.compactor import get_compactor

gz = get_compactor("gzip")
packed = gz.compress_bytes(b"hello world" * 100)
assert gz.uncompress_bytes(packed) == b"hello world" * 100
```

Each `Compactor` also has `compress(source, target)` and `uncompress(source, target)` for binary streams. The `zstd` compactor uses the fastest level.
Register your own with `register_compactor(name, compactor, replace=False)`; registering an existing name without `replace` raises `ValueError`. `get_compactor` raises `KeyError` for an unknown name, `try_get_compactor` returns `None`.

## Serialization

```python
import io
from dataclasses import dataclass, field
from zappkit.serializer import get_serializer

base = get_serializer("base")
assert base.marshal_bytes(1) == b"1"
assert base.unmarshal_bytes(b"yes", bool) is True

@dataclass
class Temp:
    a: str = field(default="", metadata={"name": "AA"})

assert base.marshal_bytes(Temp("xx")) == b'{"AA":"xx"}'
assert base.unmarshal_bytes(b'{"AA":"xx"}', Temp) == Temp("xx")

buf = io.BytesIO()
get_serializer("json").marshal({"a": 1}, buf)   # writes b'{"a":1}\n'
```

The second argument of `unmarshal`/`unmarshal_bytes` names the wanted type: `None`, a builtin type or a dataclass. The `base` serializer writes scalars as plain text and sends everything else through JSON; the `bytes` serializer accepts only bytes and strings. The names `jsoniter`, `jsoniter_standard`, `sonic` and `sonic_std` are registered as compact JSON serializers. Failures raise `SerializeError`. Use `register_serializer`, `get_serializer` and `try_get_serializer` as with compactors.

## Rolling log files

```python
from zappkit.lumberjack import RollingFile

with RollingFile("logs/app.log", max_size=10, max_backups=3, compress=True) as out:
    out.write(b"started\n")
```

When a write would push the file past `max_size` megabytes (100 when 0), the file is renamed with a timestamp (see `backup_name`) and a fresh one is opened. A single write larger than the limit raises `ValueError`. `rotate()` forces a rollover; `clean_up()` removes backups beyond `max_backups` or older than `max_age` days and gzips the rest when `compress` is set.

## Logging

```python
from zappkit.zlog.config import LogConfig
from zappkit.zlog.log import new_logger

log = new_logger(LogConfig())
log.info("service ready", {"port": 8080})
session = log.new_session_logger(user="alice")
session.warn("slow request")
```

Strings, booleans and numbers make up the message; mappings add fields; other values are attached under `logData`. `panic` raises `RuntimeError` and `fatal` raises `SystemExit` after writing. `LogConfig` chooses console or JSON output, colours, level, and whether to write to stdout and/or a `RollingFile` under `path`. Extra arguments to `new_logger` are `HookConfig` objects or interceptor functions (see `zappkit.zlog.hook.with_hook`) that may rewrite or drop entries.

`zappkit.logger` holds a process-wide logger: `new_app_logger(app_name, conf)` replaces it, `get_logger()` returns it, and `debug`, `info`, `warn`, `error`, `panic` and `fatal` write through it.

## Dependency-ordered startup

```python
from zappkit.depender import Depender, Item

started = []
items = [
    Item("web", ["db"], lambda: started.append("web")),
    Item("db", [], lambda: started.append("db")),
]
dep = Depender(items)
dep.start()      # starts db, then web
dep.close()      # closes web, then db
```

A likely cycle or a failing start raises `DependerError`.

## Handlers and registries

```python
from zappkit.registry import CreatorRegistry, HandlerType, add_handler, trigger

add_handler(HandlerType.BEFORE_START, lambda app, t: print("starting", t.name))
trigger(None, HandlerType.BEFORE_START)

plugins = CreatorRegistry("plugin")
plugins.register("cache", lambda app: object())
cache = plugins.make(None, "cache")
```

A duplicate registration or an unknown name raises `RegistryError`. `PLUGIN_CREATORS` and `SERVICE_CREATORS` are shared registries.

## Utilities

```python
from zappkit.utils import first_non_zero, go_and_wait, is_match_wildcard

assert is_match_wildcard("service.log", "*.log")
assert first_non_zero("", 0, "fallback") == "fallback"
go_and_wait(lambda: None, lambda: None)
```

`wrap_call(fn)` re-raises any exception as a `RecoverError` carrying the captured frames; `get_recover_errors` and `get_recover_error_detail` format them. `go_and_wait` runs each function in a thread and raises the first error.

## What this package does not do

There is no application object or runner here: nothing loads configuration, builds and starts plugins and services, or waits for a shutdown signal. Handlers and creator registries are provided, but calling them at the right moments is left to your own application code. Loggers do not read trace ids from tracing contexts; a `traceID` field only colours the message when you attach it yourself.

## Running the tests

```
pip install -e ".[test]"
pytest
```