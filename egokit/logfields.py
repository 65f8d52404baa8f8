"""Named key/value fields attached to log records."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, MutableMapping, Optional


@dataclass(frozen=True)
class Field:
    """One key/value pair of a log record; an empty key adds nothing."""

    key: str
    value: Any = None

    @property
    def is_skip(self) -> bool:
        """True for a field that adds nothing to a record."""
        return self.key == ""

    def add_to(self, target: MutableMapping[str, Any]) -> None:
        """Store this field in ``target`` unless it is a skip field."""
        if not self.is_skip:
            target[self.key] = self.value


SKIP = Field("")


def field_component(value: str) -> Field:
    """The component (package) a record comes from."""
    return Field("comp", value)


def field_component_name(value: str) -> Field:
    """The configuration name of the component."""
    return Field("compName", value)


def field_app(value: str) -> Field:
    """The application name."""
    return Field("app", value)


def field_addr(value: str) -> Field:
    """An address."""
    return Field("addr", value)


def field_name(value: str) -> Field:
    """A name."""
    return Field("name", value)


def field_type(value: str) -> Field:
    """A first-level type."""
    return Field("type", value)


def field_kind(value: str) -> Field:
    """A second-level kind."""
    return Field("kind", value)


def field_code(value: int) -> Field:
    """A status code."""
    return Field("code", value)


def field_origin_code(value: int) -> Field:
    """The original status code."""
    return Field("ocode", value)


def field_tid(value: str) -> Field:
    """A trace id."""
    return Field("tid", value)


def field_size(value: int) -> Field:
    """A size."""
    return Field("size", value)


def field_cost(value: timedelta) -> Field:
    """A time cost in milliseconds, kept to whole microseconds."""
    return Field("cost", (value // timedelta(microseconds=1)) / 1000)


def field_key(value: str) -> Field:
    """A key."""
    return Field("key", value)


def field_value(value: str) -> Field:
    """A value given as text."""
    return Field("value", value)


def field_value_any(value: Any) -> Field:
    """A value of any kind."""
    return Field("value", value)


def field_err_kind(value: str) -> Field:
    """The kind of an error."""
    return Field("errKind", value)


def field_err(err: Optional[BaseException]) -> Field:
    """The message of ``err``; no field at all when ``err`` is None."""
    if err is None:
        return SKIP
    return Field("error", str(err))


def field_err_any(err: Any) -> Field:
    """An error of any kind, kept as it is."""
    return Field("error", err)


def field_description(value: str) -> Field:
    """A description."""
    return Field("desc", value)


def field_ext_message(*vals: Any) -> Field:
    """Extra values, kept as a list."""
    return Field("ext", list(vals))


def field_stack(value: bytes) -> Field:
    """A stack trace given as bytes."""
    return Field("stack", value.decode("utf-8", "replace"))


def field_method(value: str) -> Field:
    """A method."""
    return Field("method", value)


def field_event(value: str) -> Field:
    """An event."""
    return Field("event", value)


def field_ip(value: str) -> Field:
    """An IP address."""
    return Field("ip", value)


def field_peer_ip(value: str) -> Field:
    """The peer's IP address."""
    return Field("peerIp", value)


def field_peer_name(value: str) -> Field:
    """The peer's name."""
    return Field("peerName", value)


def field_custom_key_value(key: str, value: str) -> Field:
    """A field under a caller-chosen key, lower-cased."""
    return Field(key.lower(), value)