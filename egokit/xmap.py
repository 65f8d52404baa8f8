"""Helpers for nested string-keyed dictionaries."""

import json
from typing import Any, Mapping, Optional


def _key_text(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "<nil>"
    if isinstance(key, float) and key.is_integer():
        return str(int(key))
    return str(key)


def _has_string_keys(mapping: Mapping) -> bool:
    return all(isinstance(key, str) for key in mapping)


def to_map_string_interface(src: Mapping[Any, Any]) -> dict:
    """Return a copy of ``src`` with every key turned into its text form."""
    return {_key_text(key): value for key, value in src.items()}


def merge_string_map(dest: dict, src: Mapping[str, Any]) -> None:
    """Merge ``src`` into ``dest`` in place, recursing into nested dicts.

    Values whose types differ are left as they are in ``dest``.
    """
    for key, src_val in src.items():
        if key not in dest:
            dest[key] = src_val
            continue
        dest_val = dest[key]
        if type(src_val) is not type(dest_val):
            continue
        if isinstance(dest_val, dict):
            if _has_string_keys(dest_val) and _has_string_keys(src_val):
                merge_string_map(dest_val, src_val)
                dest[key] = dest_val
            else:
                merged = to_map_string_interface(dest_val)
                merge_string_map(merged, to_map_string_interface(src_val))
                dest[key] = merged
        else:
            dest[key] = src_val


def _as_string_map(value: Any) -> Optional[dict]:
    if isinstance(value, dict):
        return value if _has_string_keys(value) else to_map_string_interface(value)
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


def deep_search_in_map(m: Mapping[str, Any], *paths: str) -> dict:
    """Walk ``paths`` down from ``m``, creating empty dicts where missing.

    Only the top level of ``m`` is copied; nested dicts on the path are
    shared and may gain empty entries.
    """
    current = dict(m)
    for key in paths:
        if key not in current:
            nested: dict = {}
            current[key] = nested
            current = nested
            continue
        found = _as_string_map(current[key])
        if found is None:
            found = {}
            current[key] = found
        current = found
    return current