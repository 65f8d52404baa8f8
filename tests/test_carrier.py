import pytest

from egokit.carrier import HeaderReaderWriter, MetadataReaderWriter


def test_metadata_set_lowercases_and_appends():
    carrier = MetadataReaderWriter()
    carrier.set("Trace-ID", "a")
    carrier.set("TRACE-id", "b")
    assert carrier.md == {"trace-id": ["a", "b"]}


def test_metadata_foreach_visits_all_pairs():
    carrier = MetadataReaderWriter({"x": ["1", "2"], "y": ["3"]})
    seen = []
    carrier.foreach_key(lambda k, v: seen.append((k, v)))
    assert sorted(seen) == [("x", "1"), ("x", "2"), ("y", "3")]


def test_metadata_foreach_stops_on_error():
    carrier = MetadataReaderWriter({"x": ["1", "2"]})
    seen = []

    def handler(key, val):
        seen.append(val)
        raise RuntimeError("stop")

    with pytest.raises(RuntimeError):
        carrier.foreach_key(handler)
    assert seen == ["1"]


def test_header_set_canonicalises_and_replaces():
    headers = HeaderReaderWriter()
    headers.set("content-type", "a")
    headers.set("CONTENT-TYPE", "b")
    assert headers == {"Content-Type": ["b"]}


def test_header_invalid_key_kept_as_is():
    headers = HeaderReaderWriter()
    headers.set("bad key", "v")
    assert headers["bad key"] == ["v"]


def test_header_foreach_round_trip():
    headers = HeaderReaderWriter()
    headers.set("uber-trace-id", "abc")
    copied = MetadataReaderWriter()
    headers.foreach_key(copied.set)
    assert copied.md == {"uber-trace-id": ["abc"]}