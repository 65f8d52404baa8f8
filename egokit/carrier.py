"""Key/value carriers for trace propagation over metadata and HTTP headers."""

import string
from dataclasses import dataclass, field
from typing import Callable, Dict, List

_TOKEN_CHARS = frozenset("!#$%&'*+-.^_`|~" + string.digits + string.ascii_letters)


def _canonical_header_key(key: str) -> str:
    if not key or any(char not in _TOKEN_CHARS for char in key):
        return key
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


@dataclass
class MetadataReaderWriter:
    """Carrier over a metadata mapping of lower-case keys to value lists."""

    md: Dict[str, List[str]] = field(default_factory=dict)

    def set(self, key: str, val: str) -> None:
        """Append ``val`` under the lower-cased ``key``."""
        self.md.setdefault(key.lower(), []).append(val)

    def foreach_key(self, handler: Callable[[str, str], None]) -> None:
        """Call ``handler`` on every key/value pair; an exception stops the walk."""
        for key, values in self.md.items():
            for val in values:
                handler(key, val)


class HeaderReaderWriter(dict):
    """Carrier over HTTP headers: canonical keys mapped to value lists."""

    def set(self, key: str, val: str) -> None:
        """Replace the values under the canonical form of ``key`` with ``val``."""
        self[_canonical_header_key(key)] = [val]

    def foreach_key(self, handler: Callable[[str, str], None]) -> None:
        """Call ``handler`` on every key/value pair; an exception stops the walk."""
        for key, values in self.items():
            for val in values:
                handler(key, val)