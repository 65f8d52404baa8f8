"""Structured loggers built from configuration, plus process-wide defaults."""

import os
import sys
import threading
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from egokit.logconf import (
    DEFAULT_LOGGER_NAME,
    EGO_LOGGER_NAME,
    Config,
    Level,
    default_config,
    parse_level,
)
from egokit.logfields import Field
from egokit.logwriters import provider
from egokit.xcolor import red


class PanicError(Exception):
    """Raised after a record is logged at panic level."""


def _is_development_mode() -> bool:
    return os.environ.get("EGO_DEBUG") == "true"


def _normalize_message(msg: str) -> str:
    return f"{msg:<32}"


def _sprint(args: Sequence[Any]) -> str:
    parts = []
    for index, arg in enumerate(args):
        if index and not isinstance(arg, str) and not isinstance(args[index - 1], str):
            parts.append(" ")
        parts.append(str(arg))
    return "".join(parts)


def _sprintf(template: str, args: Sequence[Any]) -> str:
    if not args:
        return template
    if template == "":
        return _sprint(args)
    return template % tuple(args)


def _sweeten(keys_and_values: Sequence[Any]) -> List[Field]:
    """Turn alternating keys and values into fields; Field items pass through."""
    fields: List[Field] = []
    items = list(keys_and_values)
    index = 0
    while index < len(items):
        item = items[index]
        if isinstance(item, Field):
            fields.append(item)
            index += 1
            continue
        if index == len(items) - 1:
            break  # a key without a value is dropped
        if isinstance(item, str):
            fields.append(Field(item, items[index + 1]))
        index += 2
    return fields


def _short_caller(depth: int) -> str:
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return "undefined"
    parts = os.path.normpath(frame.f_code.co_filename).split(os.sep)
    return f"{'/'.join(parts[-2:])}:{frame.f_lineno}"


def _panic_detail(msg: str, fields: Sequence[Field]) -> None:
    values: dict = {}
    for item in fields:
        item.add_to(values)
    print(f"{red('panic')}: \n    {red('msg')}: {msg}")
    try:
        frame = sys._getframe(3)
        print(f"    {red('loc')}: {frame.f_code.co_filename}:{frame.f_lineno}")
    except ValueError:
        pass
    for key, val in values.items():
        print(f"    {red(key)}: {val}")


class Component:
    """A logger writing records through one writer, with preset fields."""

    def __init__(
        self,
        name: str,
        config: Config,
        writer: Any,
        fields: Tuple[Field, ...] = (),
        caller_skip: Optional[int] = None,
        closer: Optional[Callable[[], None]] = None,
    ) -> None:
        self._name = name
        self._config = config
        self._writer = writer
        self._fields = tuple(fields)
        self._caller_skip = config.caller_skip if caller_skip is None else caller_skip
        self._closer = closer

    def _log(self, level: Level, msg: str, fields: Sequence[Field]) -> None:
        if level < self._config.atomic_level:
            return
        record = list(self._config.fields) + list(self._fields) + list(fields)
        if self._config.enable_add_caller:
            record.append(Field("caller", _short_caller(1 + self._caller_skip)))
        if level >= Level.DPANIC:
            record.append(Field("stack", "".join(traceback.format_stack()[:-2])))
        self._writer.emit(level, msg, record)
        if level > Level.ERROR:
            self._writer.sync()

    def _message(self, msg: str) -> str:
        return _normalize_message(msg) if self.is_debug_mode() else msg

    def set_level(self, level: Union[Level, str]) -> None:
        """Change the level in force for this logger and its writer."""
        self._config.atomic_level = parse_level(level) if isinstance(level, str) else level

    def flush(self) -> None:
        """Stop asynchronous output, if any, and write out buffered records."""
        if self._closer is not None:
            self._closer()
        self._writer.sync()

    def is_debug_mode(self) -> bool:
        """True when records are also shown on the console."""
        return self._config.debug

    def debug(self, msg: str, *fields: Field) -> None:
        """Log ``msg`` at debug level."""
        self._log(Level.DEBUG, self._message(msg), fields)

    def debugw(self, msg: str, *keys_and_values: Any) -> None:
        """Log ``msg`` at debug level with alternating keys and values."""
        self._log(Level.DEBUG, self._message(msg), _sweeten(keys_and_values))

    def debugf(self, template: str, *args: Any) -> None:
        """Log a %-formatted message at debug level."""
        self._log(Level.DEBUG, _sprintf(template, args), ())

    def info(self, msg: str, *fields: Field) -> None:
        """Log ``msg`` at info level."""
        self._log(Level.INFO, self._message(msg), fields)

    def infow(self, msg: str, *keys_and_values: Any) -> None:
        """Log ``msg`` at info level with alternating keys and values."""
        self._log(Level.INFO, self._message(msg), _sweeten(keys_and_values))

    def infof(self, template: str, *args: Any) -> None:
        """Log a %-formatted message at info level."""
        self._log(Level.INFO, _sprintf(template, args), ())

    def warn(self, msg: str, *fields: Field) -> None:
        """Log ``msg`` at warn level."""
        self._log(Level.WARN, self._message(msg), fields)

    def warnw(self, msg: str, *keys_and_values: Any) -> None:
        """Log ``msg`` at warn level with alternating keys and values."""
        self._log(Level.WARN, self._message(msg), _sweeten(keys_and_values))

    def warnf(self, template: str, *args: Any) -> None:
        """Log a %-formatted message at warn level."""
        self._log(Level.WARN, _sprintf(template, args), ())

    def error(self, msg: str, *fields: Field) -> None:
        """Log ``msg`` at error level."""
        self._log(Level.ERROR, self._message(msg), fields)

    def errorw(self, msg: str, *keys_and_values: Any) -> None:
        """Log ``msg`` at error level with alternating keys and values."""
        self._log(Level.ERROR, self._message(msg), _sweeten(keys_and_values))

    def errorf(self, template: str, *args: Any) -> None:
        """Log a %-formatted message at error level."""
        self._log(Level.ERROR, _sprintf(template, args), ())

    def panic(self, msg: str, *fields: Field) -> None:
        """Log ``msg`` at panic level, then raise PanicError."""
        _panic_detail(msg, fields)
        msg = self._message(msg)
        self._log(Level.PANIC, msg, fields)
        raise PanicError(msg)

    def panicw(self, msg: str, *keys_and_values: Any) -> None:
        """Log at panic level with keys and values, then raise PanicError."""
        msg = self._message(msg)
        self._log(Level.PANIC, msg, _sweeten(keys_and_values))
        raise PanicError(msg)

    def panicf(self, template: str, *args: Any) -> None:
        """Log a %-formatted message at panic level, then raise PanicError."""
        msg = _sprintf(template, args)
        self._log(Level.PANIC, msg, ())
        raise PanicError(msg)

    def dpanic(self, msg: str, *fields: Field) -> None:
        """Log ``msg`` at dpanic level; in debug mode also print its details."""
        if self.is_debug_mode():
            _panic_detail(msg, fields)
            msg = _normalize_message(msg)
        self._log(Level.DPANIC, msg, fields)

    def dpanicw(self, msg: str, *keys_and_values: Any) -> None:
        """Log ``msg`` at dpanic level with alternating keys and values."""
        self._log(Level.DPANIC, self._message(msg), _sweeten(keys_and_values))

    def dpanicf(self, template: str, *args: Any) -> None:
        """Log a %-formatted message at dpanic level."""
        self._log(Level.DPANIC, _sprintf(template, args), ())

    def fatal(self, msg: str, *fields: Field) -> None:
        """Log ``msg`` at fatal level and exit with status 1.

        In debug mode the details are printed and nothing else happens.
        """
        if self.is_debug_mode():
            _panic_detail(msg, fields)
            return
        self._log(Level.FATAL, msg, fields)
        raise SystemExit(1)

    def fatalw(self, msg: str, *keys_and_values: Any) -> None:
        """Log at fatal level with keys and values and exit with status 1."""
        self._log(Level.FATAL, self._message(msg), _sweeten(keys_and_values))
        raise SystemExit(1)

    def fatalf(self, template: str, *args: Any) -> None:
        """Log a %-formatted message at fatal level and exit with status 1."""
        self._log(Level.FATAL, _sprintf(template, args), ())
        raise SystemExit(1)

    def with_fields(self, *fields: Field) -> "Component":
        """Return a child logger that adds ``fields`` to every record."""
        return Component(
            "", self._config, self._writer, self._fields + tuple(fields), self._caller_skip
        )

    def with_caller_skip(self, caller_skip: int, *fields: Field) -> "Component":
        """Return a child logger skipping ``caller_skip`` more frames for the caller."""
        self._config.caller_skip = caller_skip
        return Component(
            "",
            self._config,
            self._writer,
            self._fields + tuple(fields),
            self._caller_skip + caller_skip,
        )

    def config_dir(self) -> str:
        """Return the directory of the log file."""
        return self._config.dir

    def config_name(self) -> str:
        """Return the name of the log file."""
        return self._config.name


Option = Callable[["Container"], None]


@dataclass
class Container:
    """Settings gathered for a logger before it is built."""

    config: Config = field(default_factory=default_config)
    name: str = ""

    def build(self, *options: Option) -> Component:
        """Apply ``options`` and build the logger.

        With EGO_DEBUG set to "true" the logger runs in debug mode,
        synchronously and with caller information. Raises ValueError for an
        unknown level and for an unknown writer scheme.
        """
        for option in options:
            option(self)
        config = self.config
        if _is_development_mode():
            config.debug = True
            config.enable_async = False
            config.enable_add_caller = True
        config.atomic_level = parse_level(config.level)
        closer: Optional[Callable[[], None]] = None
        if config.core is None:
            writer = provider(config.writer).build(self.name, config)
            config.core = writer
            closer = writer.close
        return Component(self.name, config, config.core, closer=closer)


def default_container() -> Container:
    """Return a container holding the default settings."""
    return Container()


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.lower() in ("true", "false", "1", "0"):
        return raw.lower() in ("true", "1")
    if isinstance(raw, int):
        return bool(raw)
    raise ValueError(f"cannot read a boolean from {raw!r}")


_CONFIG_FIELDS = {
    "debug": ("debug", _to_bool),
    "level": ("level", str),
    "dir": ("dir", str),
    "name": ("name", str),
    "enableaddcaller": ("enable_add_caller", _to_bool),
    "enableasync": ("enable_async", _to_bool),
    "writer": ("writer", str),
    "callerskip": ("caller_skip", int),
}


def _section(settings: Mapping[str, Any], key: str) -> Optional[Any]:
    node: Any = settings
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def load(key: str, settings: Mapping[str, Any]) -> Container:
    """Return a container configured from the section ``key`` of ``settings``.

    ``key`` may be dotted to reach nested sections; a missing section leaves
    the defaults. Raises ValueError when the section is not a mapping or a
    value has the wrong form.
    """
    container = default_container()
    section = _section(settings, key)
    if section is not None:
        if not isinstance(section, Mapping):
            raise ValueError(f"configuration {key!r} is not a mapping")
        for raw_key, raw in section.items():
            target = _CONFIG_FIELDS.get(str(raw_key).replace("_", "").lower())
            if target is not None:
                attr, convert = target
                setattr(container.config, attr, convert(raw))
        container.config.settings = dict(section)
    container.name = key
    return container


def with_file_name(name: str) -> Option:
    """Set the log file name."""

    def apply(container: Container) -> None:
        container.config.name = name

    return apply


def with_debug(debug: bool) -> Option:
    """Show records on the console as well."""

    def apply(container: Container) -> None:
        container.config.debug = debug

    return apply


def with_level(level: str) -> Option:
    """Set the initial level by name."""

    def apply(container: Container) -> None:
        container.config.level = level

    return apply


def with_enable_async(enable_async: bool) -> Option:
    """Buffer output and flush it in the background."""

    def apply(container: Container) -> None:
        container.config.enable_async = enable_async

    return apply


def with_enable_add_caller(enable_add_caller: bool) -> Option:
    """Add the caller's file and line to every record."""

    def apply(container: Container) -> None:
        container.config.enable_add_caller = enable_add_caller

    return apply


def with_writer(writer: Any) -> Option:
    """Use ``writer`` (with emit, sync and close) instead of building one."""

    def apply(container: Container) -> None:
        container.config.core = writer

    return apply


_defaults_lock = threading.Lock()
_default: Optional[Component] = None
_ego: Optional[Component] = None


def default_logger() -> Component:
    """Return the logger for application code, building it on first use."""
    global _default
    with _defaults_lock:
        if _default is None:
            _default = default_container().build(with_file_name(DEFAULT_LOGGER_NAME))
        return _default


def ego_logger() -> Component:
    """Return the logger for the framework itself, building it on first use."""
    global _ego
    with _defaults_lock:
        if _ego is None:
            _ego = default_container().build(with_file_name(EGO_LOGGER_NAME))
        return _ego


def debug(msg: str, *fields: Field) -> None:
    """Log at debug level on the default logger."""
    default_logger().debug(msg, *fields)


def info(msg: str, *fields: Field) -> None:
    """Log at info level on the default logger."""
    default_logger().info(msg, *fields)


def warn(msg: str, *fields: Field) -> None:
    """Log at warn level on the default logger."""
    default_logger().warn(msg, *fields)


def error(msg: str, *fields: Field) -> None:
    """Log at error level on the default logger."""
    default_logger().error(msg, *fields)


def panic(msg: str, *fields: Field) -> None:
    """Log at panic level on the default logger and raise PanicError."""
    default_logger().panic(msg, *fields)


def dpanic(msg: str, *fields: Field) -> None:
    """Log at dpanic level on the default logger."""
    default_logger().dpanic(msg, *fields)


def fatal(msg: str, *fields: Field) -> None:
    """Log at fatal level on the default logger and exit."""
    default_logger().fatal(msg, *fields)


def debugw(msg: str, *keys_and_values: Any) -> None:
    """Log at debug level with keys and values on the default logger."""
    default_logger().debugw(msg, *keys_and_values)


def infow(msg: str, *keys_and_values: Any) -> None:
    """Log at info level with keys and values on the default logger."""
    default_logger().infow(msg, *keys_and_values)


def warnw(msg: str, *keys_and_values: Any) -> None:
    """Log at warn level with keys and values on the default logger."""
    default_logger().warnw(msg, *keys_and_values)


def errorw(msg: str, *keys_and_values: Any) -> None:
    """Log at error level with keys and values on the default logger."""
    default_logger().errorw(msg, *keys_and_values)


def panicw(msg: str, *keys_and_values: Any) -> None:
    """Log at panic level with keys and values and raise PanicError."""
    default_logger().panicw(msg, *keys_and_values)


def dpanicw(msg: str, *keys_and_values: Any) -> None:
    """Log at dpanic level with keys and values on the default logger."""
    default_logger().dpanicw(msg, *keys_and_values)


def fatalw(msg: str, *keys_and_values: Any) -> None:
    """Log at fatal level with keys and values and exit."""
    default_logger().fatalw(msg, *keys_and_values)


def debugf(msg: str, *args: Any) -> None:
    """Log a formatted message at debug level on the default logger."""
    default_logger().debugf(msg, *args)


def infof(msg: str, *args: Any) -> None:
    """Log a formatted message at info level on the default logger."""
    default_logger().infof(msg, *args)


def warnf(msg: str, *args: Any) -> None:
    """Log a formatted message at warn level on the default logger."""
    default_logger().warnf(msg, *args)


def errorf(msg: str, *args: Any) -> None:
    """Log a formatted message at error level on the default logger."""
    default_logger().errorf(msg, *args)


def panicf(msg: str, *args: Any) -> None:
    """Log a formatted message at panic level and raise PanicError."""
    default_logger().panicf(msg, *args)


def dpanicf(msg: str, *args: Any) -> None:
    """Log a formatted message at dpanic level on the default logger."""
    default_logger().dpanicf(msg, *args)


def fatalf(msg: str, *args: Any) -> None:
    """Log a formatted message at fatal level and exit."""
    default_logger().fatalf(msg, *args)


def with_fields(*fields: Field) -> Component:
    """Return a child of the default logger that adds ``fields``."""
    return default_logger().with_fields(*fields)