"""Log writers: record encoding, buffered sinks and the writer registry."""

import json
import sys
import threading
import time
from contextlib import suppress
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TextIO

from egokit.logconf import Config, Level
from egokit.logfields import Field
from egokit.rotate import RotatingFile
from egokit.xcolor import blue, green, red, yellow
from egokit.xtime import parse_duration

DEFAULT_BUFFER_SIZE = 256 * 1024
DEFAULT_FLUSH_INTERVAL = timedelta(seconds=5)

Encoder = Callable[[Level, float, str, List[Field]], bytes]


def _flush(sink: Any) -> None:
    flush = getattr(sink, "flush", None)
    if flush is not None:
        flush()


def _stdout() -> TextIO:
    return sys.stdout


def _stderr() -> TextIO:
    return sys.stderr


class _StdStream:
    """Writes to the stream that ``lookup`` returns, fetched at every write."""

    def __init__(self, lookup: Callable[[], TextIO]) -> None:
        self._lookup = lookup

    def write(self, data: bytes) -> int:
        self._lookup().write(data.decode("utf-8", "replace"))
        return len(data)

    def flush(self) -> None:
        self._lookup().flush()


class _Tee:
    """Writes the same bytes to every sink."""

    def __init__(self, *sinks: Any) -> None:
        self._sinks = sinks

    def write(self, data: bytes) -> int:
        for sink in self._sinks:
            sink.write(data)
        return len(data)

    def flush(self) -> None:
        for sink in self._sinks:
            _flush(sink)


class BufferedWriter:
    """Buffers writes to ``sink`` and flushes them every ``flush_interval``.

    A record is never split: when it does not fit in the space left, what is
    buffered is flushed first, and a record larger than the whole buffer is
    written straight through. Zero size or interval selects the defaults.
    """

    def __init__(
        self, sink: Any, buffer_size: int = 0, flush_interval: timedelta = timedelta(0)
    ) -> None:
        self._sink = sink
        self.buffer_size = buffer_size or DEFAULT_BUFFER_SIZE
        self.flush_interval = flush_interval or DEFAULT_FLUSH_INTERVAL
        self._buffer = bytearray()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        threading.Thread(target=self._flush_loop, daemon=True).start()

    def __enter__(self) -> "BufferedWriter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _flush_loop(self) -> None:
        seconds = self.flush_interval.total_seconds()
        while not self._stop.wait(seconds):
            with suppress(OSError, ValueError):
                self.sync()

    def _available(self) -> int:
        return self.buffer_size - len(self._buffer)

    def _flush_locked(self) -> None:
        if self._buffer:
            data = bytes(self._buffer)
            self._buffer.clear()
            self._sink.write(data)

    def write(self, data: bytes) -> int:
        """Buffer ``data``; return its length."""
        with self._lock:
            if len(data) > self._available():
                self._flush_locked()
                if len(data) > self._available():
                    self._sink.write(bytes(data))
                    return len(data)
            self._buffer.extend(data)
            return len(data)

    def sync(self) -> None:
        """Write out everything buffered."""
        with self._lock:
            self._flush_locked()
            _flush(self._sink)

    def flush(self) -> None:
        self.sync()

    def close(self) -> None:
        """Stop the periodic flush and write out what is left."""
        self._stop.set()
        self.sync()


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def _encode_json(level: Level, moment: float, msg: str, fields: List[Field]) -> bytes:
    record: Dict[str, Any] = {"lv": level.lowercase, "ts": int(moment), "msg": msg}
    for item in fields:
        item.add_to(record)
    return (_dumps(record) + "\n").encode("utf-8")


_COLOURS = {Level.DEBUG: blue, Level.INFO: green, Level.WARN: yellow}


def _encode_console(level: Level, moment: float, msg: str, fields: List[Field]) -> bytes:
    colour = _COLOURS.get(level, red)
    parts = [
        time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(moment)),
        colour(level.capital),
        msg,
    ]
    context: Dict[str, Any] = {}
    for item in fields:
        item.add_to(context)
    if context:
        parts.append(_dumps(context))
    return ("\t".join(parts) + "\n").encode("utf-8")


class Writer:
    """Encodes records at or above the config's level and writes them out."""

    def __init__(
        self,
        sink: Any,
        config: Config,
        encoder: Encoder,
        closer: Optional[Callable[[], None]] = None,
    ) -> None:
        self._sink = sink
        self._config = config
        self._encoder = encoder
        self._closer = closer

    def emit(self, level: Level, msg: str, fields: Iterable[Field] = ()) -> bool:
        """Write one record; return False when its level is filtered out."""
        if level < self._config.atomic_level:
            return False
        self._sink.write(self._encoder(level, time.time(), msg, list(fields)))
        return True

    def sync(self) -> None:
        """Flush the sink."""
        _flush(self._sink)

    def close(self) -> None:
        """Release what the writer holds, writing out any buffered records."""
        if self._closer is not None:
            self._closer()


class StderrWriterBuilder:
    """Builds writers that print JSON records to standard error."""

    scheme = "stderr"

    def build(self, key: str, config: Config) -> Writer:
        """Return a writer for ``config``; ``key`` is not used."""
        return Writer(_StdStream(_stderr), config, _encode_json)


@dataclass
class RotateSettings:
    """Options of the rotating file writer."""

    max_size: int = 500
    max_age: int = 7
    max_backup: int = 10
    rotate_interval: timedelta = timedelta(hours=24)
    flush_buffer_size: int = 256 * 1024
    flush_buffer_interval: timedelta = timedelta(seconds=5)


_SETTING_NAMES = {
    "maxsize": "max_size",
    "maxage": "max_age",
    "maxbackup": "max_backup",
    "rotateinterval": "rotate_interval",
    "flushbuffersize": "flush_buffer_size",
    "flushbufferinterval": "flush_buffer_interval",
}


def _duration(raw: Any) -> timedelta:
    if isinstance(raw, timedelta):
        return raw
    if isinstance(raw, str):
        return parse_duration(raw)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return timedelta(seconds=raw)
    raise TypeError(f"cannot read a duration from {raw!r}")


def _rotate_settings(mapping: Mapping[str, Any]) -> RotateSettings:
    values: Dict[str, Any] = {}
    for key, raw in mapping.items():
        name = _SETTING_NAMES.get(key.replace("_", "").lower())
        if name is None:
            continue
        values[name] = _duration(raw) if name.endswith("interval") else int(raw)
    return RotateSettings(**values)


class RotateWriterBuilder:
    """Builds writers to a rotating file, buffered when async is enabled.

    In debug mode records are also printed to standard output and are
    written in the coloured console form instead of JSON.
    """

    scheme = "file"

    def build(self, key: str, config: Config) -> Writer:
        """Return a writer to ``config.filename()`` using ``config.settings``."""
        settings = _rotate_settings(config.settings)
        sink: Any = RotatingFile(
            filename=config.filename(),
            max_size=settings.max_size,
            max_age=settings.max_age,
            max_backups=settings.max_backup,
            local_time=True,
            compress=False,
            interval=settings.rotate_interval,
        )
        if config.debug:
            sink = _Tee(_StdStream(_stdout), sink)
        closer: Optional[Callable[[], None]] = None
        if config.enable_async:
            sink = BufferedWriter(
                sink, settings.flush_buffer_size, settings.flush_buffer_interval
            )
            closer = sink.close
        encoder = _encode_console if config.debug else _encode_json
        return Writer(sink, config, encoder, closer)


_registry: Dict[str, Any] = {}


def register(builder: Any) -> None:
    """Register ``builder`` under its ``scheme``, replacing any earlier one."""
    _registry[builder.scheme] = builder


def provider(scheme: str) -> Any:
    """Return the builder registered for ``scheme``.

    Raises ValueError when none is registered.
    """
    try:
        return _registry[scheme]
    except KeyError:
        raise ValueError("unsupported writer, error writer is: " + scheme) from None


register(StderrWriterBuilder())
register(RotateWriterBuilder())