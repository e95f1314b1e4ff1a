import pytest

from zappkit.zlog.config import Level, LogConfig, parse_level


@pytest.mark.parametrize("level", list(Level))
def test_parse_known_levels(level):
    assert parse_level(level.value) is level
    assert parse_level(level) is level


@pytest.mark.parametrize("text", ["verbose", "", "WARNING", None])
def test_unknown_level_falls_back_to_info(text):
    assert parse_level(text) is Level.INFO


def test_severity_is_ordered():
    names = ["debug", "info", "warn", "error", "dpanic", "panic", "fatal"]
    severities = [parse_level(name).severity for name in names]
    assert severities == sorted(severities)
    assert len(set(severities)) == len(names)


def test_default_config_values():
    conf = LogConfig()
    assert conf.level == "debug"
    assert conf.name == "zlog"
    assert conf.path == "./log"
    assert conf.file_max_size == 32
    assert conf.file_max_backups_num == 3
    assert conf.file_max_durable_time == 7
    assert conf.write_to_stream is True
    assert conf.write_to_file is False
    assert conf.time_format == "%Y-%m-%d %H:%M:%S"


def test_config_fields_are_independent_between_instances():
    a = LogConfig()
    b = LogConfig(name="app")
    assert a.name == "zlog"
    assert b.name == "app"