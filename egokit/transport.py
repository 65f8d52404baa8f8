"""Registered custom context keys and values carried under them."""

from typing import Any, Dict, List, Mapping, Optional


class _ContextKey:
    """A unique key object; each registration yields a fresh one."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"ego context value {self.name}"


_key_names: List[str] = []
_key_map: Dict[str, _ContextKey] = {}


def set_custom_keys(keys: List[str]) -> None:
    """Register ``keys`` as the custom context keys."""
    global _key_names
    _key_names = list(keys)
    for name in keys:
        _key_map[name] = _ContextKey(name)


def custom_context_keys() -> List[str]:
    """Return the registered custom context keys."""
    return list(_key_names)


def custom_context_keys_length() -> int:
    """Return how many custom context keys are registered."""
    return len(_key_names)


def with_value(ctx: Optional[Mapping[Any, Any]], key: str, value: Any) -> Dict[Any, Any]:
    """Return a new context holding ``value`` under the registered ``key``.

    Raises KeyError if ``key`` was never registered.
    """
    try:
        context_key = _key_map[key]
    except KeyError:
        raise KeyError(f"unregistered context key {key!r}") from None
    return {**(ctx or {}), context_key: value}


def value(ctx: Optional[Mapping[Any, Any]], key: str) -> Any:
    """Return the value held under ``key`` in ``ctx``, or None."""
    context_key = _key_map.get(key)
    if context_key is None or not ctx:
        return None
    return ctx.get(context_key)