"""Log levels and the settings shared by a logger and its writer."""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_LOGGER_NAME = "default.log"
EGO_LOGGER_NAME = "ego.sys"


class Level(enum.IntEnum):
    """Log severity; a higher value is more severe."""

    DEBUG = -1
    INFO = 0
    WARN = 1
    ERROR = 2
    DPANIC = 3
    PANIC = 4
    FATAL = 5

    @property
    def lowercase(self) -> str:
        """The level name in lower case, as written in JSON records."""
        return self.name.lower()

    @property
    def capital(self) -> str:
        """The level name in upper case, as written on the console."""
        return self.name


_BY_NAME = {level.name.lower(): level for level in Level}


def parse_level(text: str) -> Level:
    """Parse a level name in all lower or all upper case; "" means INFO.

    Raises ValueError for any other text.
    """
    if text == "":
        return Level.INFO
    key = text.lower()
    if key in _BY_NAME and text in (key, key.upper()):
        return _BY_NAME[key]
    raise ValueError(f"unrecognized level: {text!r}")


@dataclass
class Config:
    """Settings of one logger.

    ``settings`` holds the raw options of the configuration key, read by the
    writer builders. ``atomic_level`` is the level in force; changing it
    takes effect on the writer at once. ``core`` is a ready-made writer that
    replaces the one the ``writer`` scheme would build.
    """

    debug: bool = False
    level: str = "info"
    dir: str = "./logs"
    name: str = DEFAULT_LOGGER_NAME
    enable_add_caller: bool = False
    enable_async: bool = True
    writer: str = "file"
    caller_skip: int = 1
    fields: List[Any] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=dict)
    core: Optional[Any] = None
    atomic_level: Level = Level.INFO

    def filename(self) -> str:
        """Return the path of the log file: ``dir/name``."""
        return f"{self.dir}/{self.name}"


def default_config() -> Config:
    """Return the default settings: info level, async file writer in ./logs."""
    return Config()