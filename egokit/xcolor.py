"""ANSI colour helpers for terminal output."""

import sys

_PLAIN = sys.platform == "win32"


def _paint(code: str, msg: str) -> str:
    if _PLAIN:
        return msg
    return f"\x1b[{code}m{msg}\x1b[0m"


def yellow(msg: str) -> str:
    """Return ``msg`` coloured yellow."""
    return _paint("33", msg)


def red(msg: str) -> str:
    """Return ``msg`` coloured red."""
    return _paint("31", msg)


def blue(msg: str) -> str:
    """Return ``msg`` coloured blue."""
    return _paint("34", msg)


def green(msg: str) -> str:
    """Return ``msg`` coloured green."""
    return _paint("32", msg)