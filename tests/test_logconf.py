import pytest

from egokit.logconf import Config, Level, default_config, parse_level


@pytest.mark.parametrize(
    "text, expected",
    [
        ("debug", Level.DEBUG),
        ("info", Level.INFO),
        ("warn", Level.WARN),
        ("error", Level.ERROR),
        ("dpanic", Level.DPANIC),
        ("panic", Level.PANIC),
        ("fatal", Level.FATAL),
        ("ERROR", Level.ERROR),
        ("", Level.INFO),
    ],
)
def test_parse_level(text, expected):
    assert parse_level(text) is expected


@pytest.mark.parametrize("text", ["Debug", "verbose", "information"])
def test_parse_level_rejects_unknown(text):
    with pytest.raises(ValueError):
        parse_level(text)


def test_level_order_and_names():
    assert Level.DEBUG < Level.INFO < Level.WARN < Level.ERROR < Level.FATAL
    assert Level.WARN.lowercase == "warn"
    assert Level.DPANIC.capital == "DPANIC"
    assert all(parse_level(level.lowercase) is level for level in Level)


def test_default_config_values():
    config = default_config()
    assert config.name == "default.log"
    assert config.dir == "./logs"
    assert config.level == "info"
    assert config.writer == "file"
    assert config.caller_skip == 1
    assert config.enable_async is True
    assert config.enable_add_caller is False
    assert config.debug is False


def test_default_configs_are_independent():
    first = default_config()
    second = default_config()
    first.fields.append("x")
    assert second.fields == []


def test_filename_joins_dir_and_name():
    config = Config(dir="/var/app", name="ego.sys")
    assert config.filename() == "/var/app/ego.sys"
    assert default_config().filename() == "./logs/default.log"