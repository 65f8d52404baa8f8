"""String helpers: case conversion, names, JSON encoding and identifiers."""

import calendar
import dataclasses
import inspect
import json
import random
import threading
from datetime import datetime, timezone
from typing import Any

_TIME_BASE = calendar.timegm((1582, 10, 15, 0, 0, 0))
_MASK64 = (1 << 64) - 1

_clock_lock = threading.Lock()
_clock_seq = 0
_random = random.Random()

_HTML_ESCAPES = (
    ("&", "\\u0026"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def to_snake_case(text: str) -> str:
    """Lower-case and trim ``text``, joining words with underscores."""
    return text.strip().lower().replace(" ", "_")


def to_camel_case(text: str) -> str:
    """Drop spaces from ``text``, upper-casing the letter after each."""
    text = text.strip()
    if len(text) < 2:
        return text
    parts = []
    previous = ""
    for char in text:
        if char != " ":
            if previous == " ":
                char = char.upper()
            parts.append(char)
        previous = char
    return "".join(parts)


def function_name(fn: Any) -> str:
    """Return the dotted module path and qualified name of ``fn``."""
    return f"{fn.__module__}.{fn.__qualname__}"


def object_name(obj: Any) -> str:
    """Return the dotted module path and qualified name of ``obj``'s type."""
    kind = type(obj)
    return f"{kind.__module__}.{kind.__qualname__}"


def caller_name(skip: int) -> str:
    """Return the name of the function ``skip`` frames up; 0 is this one."""
    frame = inspect.currentframe()
    for _ in range(skip):
        if frame is None:
            break
        frame = frame.f_back
    if frame is None:
        return ""
    module = inspect.getmodule(frame)
    module_name = module.__name__ if module is not None else ""
    return f"{module_name}.{frame.f_code.co_name}"


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"cannot encode {type(obj).__name__}")


def _escape_html(text: str) -> str:
    for raw, escaped in _HTML_ESCAPES:
        text = text.replace(raw, escaped)
    return text


def to_json(obj: Any) -> str:
    """Encode ``obj`` compactly with sorted keys; "" if it cannot be encoded."""
    try:
        text = json.dumps(
            obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=_default
        )
    except (TypeError, ValueError):
        return ""
    return _escape_html(text)


def json_bytes(obj: Any) -> bytes:
    """Like :func:`to_json`, encoded as UTF-8."""
    return to_json(obj).encode("utf-8")


def pretty_json(obj: Any) -> str:
    """Encode ``obj`` indented by four spaces; "" if it cannot be encoded."""
    try:
        text = json.dumps(obj, indent=4, ensure_ascii=False, default=_default)
    except (TypeError, ValueError):
        return ""
    return _escape_html(text)


def pretty_json_bytes(obj: Any) -> bytes:
    """Like :func:`pretty_json`, encoded as UTF-8."""
    return pretty_json(obj).encode("utf-8")


def _next_clock() -> int:
    global _clock_seq
    with _clock_lock:
        _clock_seq = (_clock_seq + 1) & 0xFFFFFFFF
        return _clock_seq


def generate_uuid(seed_time: datetime) -> str:
    """Generate a time-based (version 1) UUID as 32 hex digits."""
    if seed_time.tzinfo is None:
        seed_time = seed_time.astimezone()
    utc = seed_time.astimezone(timezone.utc)
    seconds = calendar.timegm(utc.utctimetuple())
    stamp = ((seconds - _TIME_BASE) * 10_000_000 + utc.microsecond * 10) & _MASK64
    clock = _next_clock()

    raw = bytearray(16)
    raw[0:4] = (stamp & 0xFFFFFFFF).to_bytes(4, "big")
    raw[4:6] = ((stamp >> 32) & 0xFFFF).to_bytes(2, "big")
    raw[6:8] = ((stamp >> 48) & 0x0FFF).to_bytes(2, "big")
    raw[8:10] = (clock & 0xFFFF).to_bytes(2, "big")
    raw[6] |= 0x10
    raw[8] = (raw[8] & 0x3F) | 0x80
    return raw.hex()


def generate_id() -> str:
    """Generate a random 63-bit identifier as 16 hex digits."""
    return f"{_random.getrandbits(63):016x}"