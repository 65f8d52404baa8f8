from egokit.xmap import deep_search_in_map, merge_string_map, to_map_string_interface


def test_merge_two_levels():
    dest = {
        "2w": {"test": "2wtd", "test1": "2wtd1"},
        "2wa": {"test": "2wtd", "test1": "2wtd1"},
        "2wi": {"test": "2wtd", "test1": "2wtd1"},
    }
    src = {
        "2w": {"test": "2wtds", "test1": "2wtd1s"},
        "2wb": {"test": "2wtds", "test1": "2wtd1s"},
        "2wi": {"test": "2wtds", "test1": "2wtd1s"},
    }
    merge_string_map(dest, src)
    assert dest == {
        "2w": {"test": "2wtds", "test1": "2wtd1s"},
        "2wb": {"test": "2wtds", "test1": "2wtd1s"},
        "2wa": {"test": "2wtd", "test1": "2wtd1"},
        "2wi": {"test": "2wtds", "test1": "2wtd1s"},
    }


def test_merge_one_level():
    dest = {"1w": "tt", "1wa": "mq"}
    src = {"1w": "tts", "1wb": "bq"}
    merge_string_map(dest, src)
    assert dest == {"1w": "tts", "1wa": "mq", "1wb": "bq"}


def test_merge_skips_different_types():
    dest = {"a": 1}
    merge_string_map(dest, {"a": "x"})
    assert dest == {"a": 1}


def test_merge_converts_non_string_keys():
    dest = {"n": {1: "a"}}
    merge_string_map(dest, {"n": {2: "b"}})
    assert dest == {"n": {"1": "a", "2": "b"}}


def test_deep_search_in_map():
    got = deep_search_in_map({"key1": {"subkey1": "subval1"}}, "key1")
    assert got == {"subkey1": "subval1"}


def test_deep_search_missing_path_leaves_top_level_untouched():
    m = {"key1": "plain"}
    assert deep_search_in_map(m, "x", "y") == {}
    assert m == {"key1": "plain"}


def test_deep_search_non_map_value_is_replaced():
    assert deep_search_in_map({"key1": 5}, "key1") == {}


def test_to_map_string_interface():
    assert to_map_string_interface({1: 1}) == {"1": 1}