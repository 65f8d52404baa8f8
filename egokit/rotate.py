"""A file writer that rotates, prunes and optionally compresses its backups."""

import gzip
import os
import re
import shutil
import stat
import sys
import tempfile
import threading
from contextlib import suppress
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import BinaryIO, Callable, List, NamedTuple, Optional, Union

COMPRESS_SUFFIX = ".gz"
DEFAULT_MAX_SIZE = 100
MEGABYTE = 1024 * 1024

_STAMP_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{3}")
_BINARY = getattr(os, "O_BINARY", 0)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.astimezone()


def _format_stamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H-%M-%S") + f".{moment.microsecond // 1000:03d}"


def _parse_stamp(text: str) -> datetime:
    if not _STAMP_PATTERN.fullmatch(text):
        raise ValueError(f"not a backup timestamp: {text!r}")
    return datetime.strptime(text, "%Y-%m-%dT%H-%M-%S.%f").replace(tzinfo=timezone.utc)


def _split_ext(base: str) -> "tuple[str, str]":
    dot = base.rfind(".")
    if dot < 0:
        return base, ""
    return base[:dot], base[dot:]


def _chown(name: str, info: os.stat_result) -> None:
    """Create ``name`` owned like ``info``; does nothing off Linux."""
    if not sys.platform.startswith("linux"):
        return
    fd = os.open(name, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, stat.S_IMODE(info.st_mode))
    os.close(fd)
    os.chown(name, info.st_uid, info.st_gid)


def _backup_name(name: str, moment: datetime, local: bool) -> str:
    directory, base = os.path.split(name)
    prefix, ext = _split_ext(base)
    moment = _aware(moment)
    moment = moment.astimezone() if local else moment.astimezone(timezone.utc)
    return os.path.join(directory, f"{prefix}{ext}.{_format_stamp(moment)}")


def backup_name(name: str, local: bool) -> str:
    """Return ``name`` with the current time appended, local or UTC."""
    return _backup_name(name, _local_now(), local)


def compress_log_file(src: str, dst: str) -> None:
    """Gzip ``src`` into ``dst`` and remove ``src``.

    On failure ``dst`` is removed and OSError is raised.
    """
    try:
        source = open(src, "rb")
    except OSError as exc:
        raise OSError(f"failed to open log file: {exc}") from exc
    try:
        try:
            info = os.stat(src)
        except OSError as exc:
            raise OSError(f"failed to stat log file: {exc}") from exc
        try:
            _chown(dst, info)
        except OSError as exc:
            raise OSError(f"failed to chown compressed log file: {exc}") from exc
        try:
            fd = os.open(
                dst, os.O_CREAT | os.O_TRUNC | os.O_WRONLY | _BINARY, stat.S_IMODE(info.st_mode)
            )
        except OSError as exc:
            raise OSError(f"failed to open compressed log file: {exc}") from exc
        try:
            with os.fdopen(fd, "wb") as target, gzip.GzipFile(fileobj=target, mode="wb") as gz:
                shutil.copyfileobj(source, gz)
            source.close()
            os.remove(src)
        except OSError as exc:
            with suppress(OSError):
                os.remove(dst)
            raise OSError(f"failed to compress log file: {exc}") from exc
    finally:
        source.close()


class _Backup(NamedTuple):
    timestamp: datetime
    name: str


@dataclass
class RotatingFile:
    """Writes to ``filename``, moving it aside when it grows too large or old.

    Backups are named ``<name>.<timestamp>`` in the same directory. After a
    rotation, backups beyond ``max_backups`` or older than ``max_age`` days
    are deleted, and the rest are gzipped when ``compress`` is set. A zero
    limit disables that rule. ``max_size`` counts ``size_unit`` bytes and
    defaults to 100 units.
    """

    filename: str = ""
    max_size: int = 0
    max_age: int = 0
    max_backups: int = 0
    local_time: bool = False
    compress: bool = False
    interval: timedelta = timedelta(0)
    clock: Callable[[], datetime] = _local_now
    size_unit: int = MEGABYTE

    _size: int = field(default=0, init=False, repr=False)
    _ctime: datetime = field(
        default=datetime.min.replace(tzinfo=timezone.utc), init=False, repr=False
    )
    _file: Optional[BinaryIO] = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __enter__(self) -> "RotatingFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def write(self, data: Union[bytes, bytearray, str]) -> int:
        """Write ``data``, rotating first if needed; return the bytes written.

        Raises ValueError when ``data`` alone exceeds the maximum size.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        length = len(data)
        with self._lock:
            limit = self._max()
            if length > limit:
                raise ValueError(f"write length {length} exceeds maximum file size {limit}")
            if self._file is None:
                self._open_existing_or_new(length)
            if self._size + length > limit:
                self._rotate()
            if self.interval > timedelta(0) and self._ctime < self._now() - self.interval:
                self._rotate()
            written = self._file.write(data) or 0
            self._size += written
            return written

    def close(self) -> None:
        """Close the current file, if open."""
        with self._lock:
            self._close()

    def rotate(self) -> None:
        """Move the current file aside now and start a new one."""
        with self._lock:
            self._rotate()

    def _now(self) -> datetime:
        return _aware(self.clock())

    def _close(self) -> None:
        if self._file is None:
            return
        current, self._file = self._file, None
        current.close()

    def _rotate(self) -> None:
        self._close()
        self._open_new()
        self._mill()

    def _open_new(self) -> None:
        try:
            os.makedirs(self._dir(), 0o755, exist_ok=True)
        except OSError as exc:
            raise OSError(f"can't make directories for new logfile: {exc}") from exc
        name = self._filename()
        mode = 0o644
        try:
            info: Optional[os.stat_result] = os.stat(name)
        except OSError:
            info = None
        if info is not None:
            mode = stat.S_IMODE(info.st_mode)
            try:
                os.rename(name, _backup_name(name, self._now(), self.local_time))
            except OSError as exc:
                raise OSError(f"can't rename log file: {exc}") from exc
            _chown(name, info)
        try:
            fd = os.open(name, os.O_CREAT | os.O_WRONLY | os.O_TRUNC | _BINARY, mode)
        except OSError as exc:
            raise OSError(f"can't open new logfile: {exc}") from exc
        self._file = os.fdopen(fd, "wb", buffering=0)
        self._size = 0
        self._ctime = self._now()

    def _open_existing_or_new(self, write_len: int) -> None:
        self._mill()
        name = self._filename()
        try:
            info = os.stat(name)
        except FileNotFoundError:
            self._open_new()
            return
        except OSError as exc:
            raise OSError(f"error getting log file info: {exc}") from exc
        if info.st_size + write_len >= self._max():
            self._rotate()
            return
        try:
            handle = open(name, "ab", buffering=0)
        except OSError:
            self._open_new()
            return
        self._file = handle
        self._size = info.st_size
        with suppress(OSError):
            created = os.fstat(handle.fileno()).st_ctime
            self._ctime = datetime.fromtimestamp(created, tz=timezone.utc)

    def _filename(self) -> str:
        if self.filename:
            return self.filename
        name = os.path.basename(sys.argv[0] if sys.argv else "") + "-rotate.log"
        return os.path.join(tempfile.gettempdir(), name)

    def _dir(self) -> str:
        return os.path.dirname(self._filename()) or "."

    def _max(self) -> int:
        if self.max_size == 0:
            return DEFAULT_MAX_SIZE * self.size_unit
        return self.max_size * self.size_unit

    def _prefix_and_ext(self) -> "tuple[str, str]":
        return _split_ext(os.path.basename(self._filename()))

    def _mill(self) -> None:
        # Pruning failures must never break logging.
        with suppress(OSError):
            self._mill_run_once()

    def _mill_run_once(self) -> None:
        if self.max_backups == 0 and self.max_age == 0 and not self.compress:
            return
        files = self._old_log_files()
        remove: List[_Backup] = []
        compress: List[_Backup] = []

        if 0 < self.max_backups < len(files):
            preserved = set()
            remaining = []
            for backup in files:
                preserved.add(backup.name.removesuffix(COMPRESS_SUFFIX))
                if len(preserved) > self.max_backups:
                    remove.append(backup)
                else:
                    remaining.append(backup)
            files = remaining

        if self.max_age > 0:
            cutoff = self._now() - timedelta(days=self.max_age)
            remaining = []
            for backup in files:
                (remove if backup.timestamp < cutoff else remaining).append(backup)
            files = remaining

        if self.compress:
            compress = [b for b in files if not b.name.endswith(COMPRESS_SUFFIX)]

        errors: List[OSError] = []
        directory = self._dir()
        for backup in remove:
            try:
                os.remove(os.path.join(directory, backup.name))
            except OSError as exc:
                errors.append(exc)
        for backup in compress:
            path = os.path.join(directory, backup.name)
            try:
                compress_log_file(path, path + COMPRESS_SUFFIX)
            except OSError as exc:
                errors.append(exc)
        if errors:
            raise errors[0]

    def _old_log_files(self) -> List[_Backup]:
        try:
            entries = list(os.scandir(self._dir()))
        except OSError as exc:
            raise OSError(f"can't read log file directory: {exc}") from exc
        prefix, ext = self._prefix_and_ext()
        backups = []
        for entry in entries:
            if entry.is_dir():
                continue
            try:
                stamp = self._time_from_name(entry.name, prefix, ext)
            except ValueError:
                continue
            backups.append(_Backup(stamp, entry.name))
        backups.sort(key=lambda backup: backup.timestamp, reverse=True)
        return backups

    @staticmethod
    def _time_from_name(filename: str, prefix: str, ext: str) -> datetime:
        base = prefix + ext
        if filename == base:
            raise ValueError("not old file")
        if not filename.startswith(base):
            raise ValueError("mismatched prefix")
        stamp = filename[len(base) + 1:]
        if filename.endswith(COMPRESS_SUFFIX):
            stamp = stamp[: -len(COMPRESS_SUFFIX)]
        return _parse_stamp(stamp)