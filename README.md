# egokit

Building blocks for long-running Python services. The package uses only the standard library.

## What is in it

- `egokit.lifecycle`: `Cycle` runs functions in background threads. `wait(hang)` blocks until one of them raises, in which case it returns the exception, or until the cycle is closed, in which case it returns None. `done()` returns an event that is set once every started function has returned. `done_and_close()` waits for that event and then closes the cycle.
- `egokit.logger`: structured loggers.
  - `load(key, settings)` reads one section of a settings mapping into a `Container`.
  - `Container.build(*options)` returns a `Component` with the `debug`/`info`/`warn`/`error`/`panic`/`dpanic`/`fatal` methods. Each method also comes in a `...w` (keys and values) form and a `...f` (%-format) form.
  - `panic` raises `PanicError` and `fatal` raises `SystemExit(1)`.
  - `default_logger()` and `ego_logger()` return process-wide loggers. The module-level functions `info`, `error` and so on log through `default_logger()`.
  - Setting the environment variable `EGO_DEBUG=true` switches built loggers to debug mode. In debug mode output is also shown on the console, written synchronously, and includes the caller's file and line.
- `egokit.logconf`: `Level`, `parse_level`, and `Config` with `default_config()`.
- `egokit.logfields`: `Field` and the `field_*` helpers, such as `field_component` and `field_err`.
- `egokit.logwriters`: writer builders registered by scheme.
  - `"stderr"` writes JSON records to standard error.
  - `"file"` writes to a rotating file, optionally through a `BufferedWriter` that flushes periodically.
  - `register` adds a builder and `provider` looks one up.
- `egokit.rotate`: `RotatingFile`, a file writer that rotates on size or age. It prunes old backups by count or age and can gzip them. The module also provides `backup_name` and `compress_log_file`.
- Utilities:
  - `egokit.xcolor`: ANSI colours.
  - `egokit.xmap`: `merge_string_map`, `deep_search_in_map` and `to_map_string_interface`.
  - `egokit.xstring`: case conversion, JSON helpers, `generate_uuid` and `generate_id`.
  - `egokit.xtime`: `parse_duration`, `TimeFormat` and `parse_in_location`, which uses the `TZ` variable.
  - `egokit.xdebug`: coloured request/reply lines.
  - `egokit.transport`: registered custom context keys.
  - `egokit.carrier`: metadata and header carriers.

## Installation

```
pip install egokit
```

To run the tests:

```
pip install "egokit[test]"
pytest
```

## Quick look

```python
from egokit import logger
from egokit.logfields import field_component, field_addr

log = logger.load("default", {"default": {"level": "info", "writer": "stderr"}}).build()
log.info("server started", field_component("app"), field_addr("0.0.0.0:9001"))
log.flush()
```

Running work under a lifecycle:

```python
from egokit.lifecycle import Cycle

cycle = Cycle()
cycle.run(lambda: None)
cycle.done_and_close()
```

Rotating files directly:

```python
from egokit.rotate import RotatingFile

out = RotatingFile("logs/app.log", max_size=10, max_backups=3)
out.write(b"hello\n")
out.rotate()
out.close()
```

Utilities:

```python
from datetime import datetime, timezone
from egokit.xstring import to_camel_case, generate_uuid
from egokit.xtime import parse_duration

to_camel_case("hello big world")            # "helloBigWorld"
parse_duration("2m")                        # timedelta(minutes=2)
generate_uuid(datetime.now(timezone.utc))   # 32 hex characters
```

## What it does not do

- It is a set of libraries, not an application runner. It has no command, no server, no job or cron scheduler and no signal handling.
- It does not read configuration files. `logger.load` takes a mapping that you have already loaded.
- It does not export metrics or traces. The trace carriers only hold key/value pairs.