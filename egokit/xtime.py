"""Duration parsing and layout-based time formatting."""

import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterator, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_UNITS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}
_PART = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]*)")
_MAX_NANOS = (1 << 63) - 1

_TOKENS = (
    ("January", "%B"),
    ("Monday", "%A"),
    ("Z07:00", "%z"),
    ("-07:00", "%z"),
    ("-0700", "%z"),
    ("2006", "%Y"),
    (".000000", ".%f"),
    ("Jan", "%b"),
    ("Mon", "%a"),
    ("MST", "%Z"),
    ("01", "%m"),
    ("02", "%d"),
    ("03", "%I"),
    ("04", "%M"),
    ("05", "%S"),
    ("06", "%y"),
    ("15", "%H"),
    ("PM", "%p"),
)
_DIRECTIVES = dict(_TOKENS)


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "300ms", "-1.5h" or "2h45m".

    Raises ValueError when the text is not a valid duration.
    """
    rest = text
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f"invalid duration {text!r}")
    total = 0
    while rest:
        match = _PART.match(rest)
        whole, frac, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not frac:
            raise ValueError(f"invalid duration {text!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {text!r}")
        if unit not in _UNITS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        scale = _UNITS[unit]
        total += int(whole or "0") * scale
        if frac:
            total += int(frac) * scale // 10 ** len(frac)
        if total > _MAX_NANOS:
            raise ValueError(f"invalid duration {text!r}")
        rest = rest[match.end():]
    delta = timedelta(microseconds=total // 1000)
    return -delta if negative else delta


def _tokenize(layout: str) -> Iterator[Tuple[bool, str]]:
    literal = []
    pos = 0
    while pos < len(layout):
        for token, _ in _TOKENS:
            if layout.startswith(token, pos):
                if literal:
                    yield False, "".join(literal)
                    literal = []
                yield True, token
                pos += len(token)
                break
        else:
            literal.append(layout[pos])
            pos += 1
    if literal:
        yield False, "".join(literal)


def _format_offset(token: str, moment: datetime) -> str:
    offset = moment.utcoffset() or timedelta(0)
    if token == "Z07:00" and not offset:
        return "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    separator = "" if token == "-0700" else ":"
    return f"{sign}{minutes // 60:02d}{separator}{minutes % 60:02d}"


def _format_token(token: str, moment: datetime) -> str:
    if token in ("Z07:00", "-07:00", "-0700"):
        return _format_offset(token, moment)
    if token == "MST":
        return moment.tzname() or ""
    return moment.strftime(_DIRECTIVES[token])


@dataclass(frozen=True)
class TimeFormat:
    """A time layout written with the reference time 2006-01-02 15:04:05."""

    layout: str

    def format(self, moment: datetime) -> str:
        """Render ``moment`` using this layout."""
        return "".join(
            _format_token(text, moment) if is_token else text
            for is_token, text in _tokenize(self.layout)
        )


TS = TimeFormat("2006-01-02 15:04:05")


def _location() -> tzinfo:
    name = os.environ.get("TZ", "")
    if name in ("", "UTC"):
        return timezone.utc
    if name == "Local":
        return datetime.now().astimezone().tzinfo
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown time zone {name}") from exc


def parse_in_location(layout: str, value: str) -> datetime:
    """Parse ``value`` with ``layout`` in the zone named by the TZ variable.

    An unset or empty TZ means UTC. An offset present in ``value`` wins.
    """
    location = _location()
    pattern = "".join(
        _DIRECTIVES[text] if is_token else text.replace("%", "%%")
        for is_token, text in _tokenize(layout)
    )
    parsed = datetime.strptime(value, pattern)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=location)
    return parsed