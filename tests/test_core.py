import pytest

from zappkit.zlog.config import Level
from zappkit.zlog.core import (
    LOG_DATA_KEY,
    LOG_ID_KEY,
    CustomCaller,
    Logger,
    next_logger_id,
    with_caller,
)


def _logger(**kwargs):
    records = []
    log = Logger(lambda entry, fields: records.append((entry, list(fields))), **kwargs)
    return log, records


def test_message_joins_operands_like_sprint():
    log, records = _logger()
    log.info("a", 1, 2, "b")
    assert records[0][0].message == "a1 2b"
    assert records[0][0].level is Level.INFO


def test_bool_and_float_formatting():
    log, records = _logger()
    log.info(True)
    log.info(1000000.0)
    log.info(1.5)
    assert [r[0].message for r in records] == ["true", "1e+06", "1.5"]


def test_level_filter():
    log, records = _logger(level="warn")
    log.debug("d")
    log.info("i")
    log.warn("w")
    log.error("e")
    assert [r[0].message for r in records] == ["w", "e"]


def test_log_with_level_name():
    log, records = _logger()
    log.log("error", "boom")
    assert records[0][0].level is Level.ERROR


def test_panic_writes_then_raises():
    log, records = _logger()
    with pytest.raises(RuntimeError, match="oops"):
        log.panic("oops")
    assert records[0][0].message == "oops"


def test_fatal_writes_then_exits():
    log, records = _logger()
    with pytest.raises(SystemExit) as info:
        log.fatal("bye")
    assert info.value.code == 1
    assert records[0][0].level is Level.FATAL


def test_mapping_and_other_args_become_fields():
    log, records = _logger()
    payload = [1, 2]
    log.info("msg", {"user": "u1"}, payload)
    _, fields = records[0]
    assert ("user", "u1") in fields
    assert (LOG_DATA_KEY, payload) in fields
    assert records[0][0].message == "msg"


def test_custom_caller_is_reported():
    log, records = _logger()
    log.info("x", with_caller("fn", "file.py", 7))
    assert records[0][0].caller == CustomCaller("fn", "file.py", 7)


def test_auto_caller_and_caller_min_level():
    log, records = _logger(caller_min_level="error")
    log.info("low")
    log.error("high")
    assert records[0][0].caller is None
    caller = records[1][0].caller
    assert caller.function == "test_auto_caller_and_caller_min_level"
    assert caller.file == __file__


def test_add_fields_appear_on_entries():
    log, records = _logger()
    log.add_fields(service="api", port=80)
    log.info("x")
    assert records[0][1] == [("service", "api"), ("port", 80)]


def test_remove_fields_with_count():
    log, _ = _logger(fields=[("a", 1), ("b", 2), ("a", 3), ("c", 4)])
    assert log.remove_fields(1, "a") == 1
    assert log.fields == [("b", 2), ("a", 3), ("c", 4)]


def test_remove_fields_all():
    log, _ = _logger(fields=[("a", 1), ("b", 2), ("a", 3), ("c", 4)])
    assert log.remove_fields(0, "a", "c") == 3
    assert log.fields == [("b", 2)]


def test_remove_fields_nothing_to_do():
    log, _ = _logger()
    assert log.remove_fields(0, "a") == 0
    log.add_fields(a=1)
    assert log.remove_fields(0) == 0
    assert log.fields == [("a", 1)]


def test_session_logger_adds_log_id_and_keeps_parent():
    log, records = _logger(fields={"base": 1})
    s1 = log.new_session_logger(extra=2)
    s2 = log.new_session_logger()
    s1.info("x")
    fields = records[0][1]
    keys = [k for k, _ in fields]
    assert keys == ["base", LOG_ID_KEY, "extra"]
    id1 = dict(s1.fields)[LOG_ID_KEY]
    id2 = dict(s2.fields)[LOG_ID_KEY]
    assert id1 != id2
    assert log.fields == [("base", 1)]


def test_next_logger_id_shape():
    alphabet = set("0123456789abcdefghijklmnopqrstuv")
    ids = [next_logger_id() for _ in range(50)]
    assert all(len(i) == 7 and set(i) <= alphabet for i in ids)
    assert len(set(ids)) == 50
    assert ids == sorted(ids)