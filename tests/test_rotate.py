import gzip
import os
import re
from datetime import datetime, timedelta, timezone

import pytest

from egokit.rotate import RotatingFile, backup_name, compress_log_file

START = datetime(2016, 11, 4, 18, 30, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start=START):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def make_file(tmp_path, clock=None, **kwargs):
    kwargs.setdefault("size_unit", 1)
    kwargs.setdefault("max_size", 10)
    return RotatingFile(filename=str(tmp_path / "foo.log"), clock=clock or FakeClock(), **kwargs)


def listing(tmp_path):
    return sorted(p.name for p in tmp_path.iterdir())


def test_write_creates_file(tmp_path):
    log = make_file(tmp_path)
    assert log.write(b"hello") == 5
    log.close()
    assert (tmp_path / "foo.log").read_bytes() == b"hello"


def test_write_accepts_text(tmp_path):
    with make_file(tmp_path) as log:
        assert log.write("abc") == 3
    assert (tmp_path / "foo.log").read_bytes() == b"abc"


def test_write_too_long_raises(tmp_path):
    log = make_file(tmp_path)
    with pytest.raises(ValueError, match="exceeds maximum file size 10"):
        log.write(b"x" * 11)
    assert listing(tmp_path) == []


def test_default_max_size_is_hundred_units(tmp_path):
    log = make_file(tmp_path, max_size=0)
    with pytest.raises(ValueError):
        log.write(b"x" * 101)
    assert log.write(b"x" * 100) == 100
    log.close()


def test_rotates_when_size_exceeded(tmp_path):
    log = make_file(tmp_path)
    log.write(b"first!")
    log.write(b"second")
    log.close()
    backup = tmp_path / "foo.log.2016-11-04T18-30-00.000"
    assert backup.read_bytes() == b"first!"
    assert (tmp_path / "foo.log").read_bytes() == b"second"


def test_appends_to_small_existing_file(tmp_path):
    (tmp_path / "foo.log").write_bytes(b"abc")
    log = make_file(tmp_path)
    log.write(b"def")
    log.close()
    assert listing(tmp_path) == ["foo.log"]
    assert (tmp_path / "foo.log").read_bytes() == b"abcdef"


def test_rotates_existing_file_that_would_overflow(tmp_path):
    (tmp_path / "foo.log").write_bytes(b"12345678")
    log = make_file(tmp_path)
    log.write(b"abc")
    log.close()
    assert (tmp_path / "foo.log.2016-11-04T18-30-00.000").read_bytes() == b"12345678"
    assert (tmp_path / "foo.log").read_bytes() == b"abc"


def test_close_then_write_appends(tmp_path):
    log = make_file(tmp_path)
    log.write(b"a")
    log.close()
    log.write(b"b")
    log.close()
    assert (tmp_path / "foo.log").read_bytes() == b"ab"


def test_rotate_without_existing_file(tmp_path):
    log = make_file(tmp_path)
    log.rotate()
    log.close()
    assert listing(tmp_path) == ["foo.log"]
    assert (tmp_path / "foo.log").read_bytes() == b""


def test_explicit_rotate_moves_file(tmp_path):
    log = make_file(tmp_path)
    log.write(b"old")
    log.rotate()
    log.write(b"new")
    log.close()
    assert (tmp_path / "foo.log.2016-11-04T18-30-00.000").read_bytes() == b"old"
    assert (tmp_path / "foo.log").read_bytes() == b"new"


def test_interval_rotation(tmp_path):
    clock = FakeClock()
    log = make_file(tmp_path, clock=clock, interval=timedelta(hours=1))
    log.write(b"a")
    clock.advance(hours=2)
    log.write(b"b")
    log.close()
    assert (tmp_path / "foo.log.2016-11-04T20-30-00.000").read_bytes() == b"a"
    assert (tmp_path / "foo.log").read_bytes() == b"b"


def test_max_backups_keeps_newest(tmp_path):
    clock = FakeClock()
    log = make_file(tmp_path, clock=clock, max_size=5, max_backups=2)
    for k in range(5):
        log.write(f"chunk{k}"[:5].encode() if k else b"chnk0")
        clock.advance(seconds=1)
    log.close()
    names = listing(tmp_path)
    assert names == [
        "foo.log",
        "foo.log.2016-11-04T18-30-03.000",
        "foo.log.2016-11-04T18-30-04.000",
    ]
    assert (tmp_path / "foo.log.2016-11-04T18-30-04.000").read_bytes() == b"chunk"


def test_max_backups_ignores_foreign_files(tmp_path):
    (tmp_path / "foo.log.bak").write_bytes(b"keep")
    (tmp_path / "other.txt").write_bytes(b"keep")
    clock = FakeClock()
    log = make_file(tmp_path, clock=clock, max_backups=1)
    for _ in range(3):
        log.write(b"x")
        log.rotate()
        clock.advance(seconds=1)
    log.close()
    names = listing(tmp_path)
    assert "foo.log.bak" in names
    assert "other.txt" in names
    assert len([n for n in names if re.fullmatch(r"foo\.log\.\d{4}.*", n)]) == 1


def test_max_age_removes_old_backups(tmp_path):
    old = tmp_path / "foo.log.2016-10-01T00-00-00.000"
    old.write_bytes(b"stale")
    log = make_file(tmp_path, max_age=7)
    log.write(b"fresh")
    log.rotate()
    log.close()
    assert not old.exists()
    assert (tmp_path / "foo.log.2016-11-04T18-30-00.000").read_bytes() == b"fresh"


def test_compress_backups(tmp_path):
    log = make_file(tmp_path, compress=True)
    log.write(b"hello")
    log.rotate()
    log.close()
    plain = tmp_path / "foo.log.2016-11-04T18-30-00.000"
    assert not plain.exists()
    with gzip.open(str(plain) + ".gz", "rb") as handle:
        assert handle.read() == b"hello"


def test_compressed_and_plain_count_once(tmp_path):
    (tmp_path / "foo.log.2016-11-01T00-00-00.000.gz").write_bytes(gzip.compress(b"a"))
    (tmp_path / "foo.log.2016-11-02T00-00-00.000").write_bytes(b"b")
    log = make_file(tmp_path, max_backups=2)
    log.rotate()
    log.close()
    assert listing(tmp_path) == [
        "foo.log",
        "foo.log.2016-11-01T00-00-00.000.gz",
        "foo.log.2016-11-02T00-00-00.000",
    ]


def test_backup_name_format():
    name = os.path.join("logs", "server.log")
    result = backup_name(name, False)
    assert os.path.dirname(result) == "logs"
    assert re.fullmatch(
        r"server\.log\.\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{3}", os.path.basename(result)
    )


def test_backup_name_local_and_utc_share_prefix():
    assert backup_name("app", True).startswith("app.")
    assert backup_name("app", False).startswith("app.")


def test_compress_log_file(tmp_path):
    src = tmp_path / "plain.log"
    src.write_bytes(b"line one\nline two\n")
    dst = tmp_path / "plain.log.gz"
    compress_log_file(str(src), str(dst))
    assert not src.exists()
    with gzip.open(dst, "rb") as handle:
        assert handle.read() == b"line one\nline two\n"


def test_compress_log_file_missing_source(tmp_path):
    with pytest.raises(OSError, match="failed to open log file"):
        compress_log_file(str(tmp_path / "missing.log"), str(tmp_path / "missing.log.gz"))
    assert not (tmp_path / "missing.log.gz").exists()


def test_creates_missing_directories(tmp_path):
    log = RotatingFile(filename=str(tmp_path / "a" / "b" / "app.log"), clock=FakeClock())
    log.write(b"deep")
    log.close()
    assert (tmp_path / "a" / "b" / "app.log").read_bytes() == b"deep"