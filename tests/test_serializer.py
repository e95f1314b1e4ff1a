import dataclasses
import io

import pytest

from zappkit.serializer import (
    BASE_SERIALIZER_NAME,
    BYTES_SERIALIZER_NAME,
    JSON_SERIALIZER_NAME,
    MSGPACK_SERIALIZER_NAME,
    YAML_SERIALIZER_NAME,
    BaseSerializer,
    BytesSerializer,
    JsonSerializer,
    MsgPackSerializer,
    SerializeError,
    YamlSerializer,
    get_serializer,
    register_serializer,
    try_get_serializer,
)


@dataclasses.dataclass
class Temp:
    A: str = dataclasses.field(default="", metadata={"name": "AA"})


@dataclasses.dataclass
class Outer:
    name: str
    inner: Temp
    count: int = 0


MARSHAL_CASES = [
    ("hello", "hello"),
    (1, "1"),
    (True, "true"),
    (1.2, "1.2"),
    (b"hello", "hello"),
    (Temp("xx"), '{"AA":"xx"}'),
]


@pytest.mark.parametrize("value,expected", MARSHAL_CASES)
def test_base_marshal_to_writer(value, expected):
    buf = io.BytesIO()
    get_serializer(BASE_SERIALIZER_NAME).marshal(value, buf)
    assert buf.getvalue().decode() == expected


@pytest.mark.parametrize("value,expected", MARSHAL_CASES)
def test_base_marshal_bytes(value, expected):
    assert get_serializer(BASE_SERIALIZER_NAME).marshal_bytes(value).decode() == expected


@pytest.mark.parametrize(
    "data,target,expected",
    [
        ("hello", str, "hello"),
        ("1", int, 1),
        ("1", bool, True),
        ("1.2", float, 1.2),
        ("hello", bytes, b"hello"),
        ('{"AA":"xx"}', Temp, Temp("xx")),
    ],
)
def test_base_unmarshal(data, target, expected):
    result = get_serializer(BASE_SERIALIZER_NAME).unmarshal(io.BytesIO(data.encode()), target)
    assert result == expected


def test_base_marshal_none_and_false():
    s = BaseSerializer()
    assert s.marshal_bytes(None) == b""
    assert s.marshal_bytes(False) == b"false"
    assert s.marshal_bytes(-42) == b"-42"


def test_base_marshal_float_forms():
    s = BaseSerializer()
    assert s.marshal_bytes(1.0) == b"1"
    assert s.marshal_bytes(1e-7) == b"1e-7"


def test_base_marshal_nan_fails():
    with pytest.raises(SerializeError):
        BaseSerializer().marshal_bytes(float("nan"))


@pytest.mark.parametrize("word", ["yes", "On", "ENABLED", "open", "t"])
def test_base_bool_true_words(word):
    assert BaseSerializer().unmarshal_bytes(word.encode(), bool) is True


@pytest.mark.parametrize("word", ["", "no", "Off", "cancel", "NULL", "None", "0"])
def test_base_bool_false_words(word):
    assert BaseSerializer().unmarshal_bytes(word.encode(), bool) is False


def test_base_bool_invalid():
    with pytest.raises(SerializeError):
        BaseSerializer().unmarshal_bytes(b"maybe", bool)


@pytest.mark.parametrize("text", ["1.5", " 1", "1_000", "abc", ""])
def test_base_int_invalid(text):
    with pytest.raises(SerializeError):
        BaseSerializer().unmarshal_bytes(text.encode(), int)


def test_base_int_signed():
    assert BaseSerializer().unmarshal_bytes(b"-17", int) == -17


def test_base_none_target_returns_none():
    assert BaseSerializer().unmarshal_bytes(b"anything", None) is None


def test_bytes_serializer_round_trip():
    s = get_serializer(BYTES_SERIALIZER_NAME)
    assert s.marshal_bytes("héllo") == "héllo".encode()
    assert s.unmarshal_bytes(b"abc", str) == "abc"
    assert s.unmarshal(io.BytesIO(b"xyz"), bytes) == b"xyz"


def test_bytes_serializer_rejects_other_types():
    with pytest.raises(SerializeError, match="a not bytes"):
        BytesSerializer().marshal_bytes(12)
    with pytest.raises(SerializeError):
        BytesSerializer().unmarshal_bytes(b"1", int)


def test_json_marshal_compact_and_writer_newline():
    s = JsonSerializer()
    assert s.marshal_bytes({"a": [1, 2]}) == b'{"a":[1,2]}'
    buf = io.BytesIO()
    s.marshal({"a": 1}, buf)
    assert buf.getvalue() == b'{"a":1}\n'


def test_json_nested_dataclass_round_trip():
    s = get_serializer(JSON_SERIALIZER_NAME)
    value = Outer("n", Temp("v"), 3)
    data = s.marshal_bytes(value)
    assert data == b'{"name":"n","inner":{"AA":"v"},"count":3}'
    assert s.unmarshal_bytes(data, Outer) == value


def test_json_bytes_as_base64():
    s = JsonSerializer()
    assert s.marshal_bytes(b"hi") == b'"aGk="'
    assert s.unmarshal_bytes(b'"aGk="', bytes) == b"hi"


def test_json_type_mismatch():
    with pytest.raises(SerializeError):
        JsonSerializer().unmarshal_bytes(b'"x"', int)


def test_json_invalid_data():
    with pytest.raises(SerializeError):
        JsonSerializer().unmarshal_bytes(b"{broken", None)


def test_msgpack_round_trip():
    s = get_serializer(MSGPACK_SERIALIZER_NAME)
    value = {"k": [1, "two", b"\x00\x01"], "t": True}
    assert s.unmarshal_bytes(s.marshal_bytes(value)) == value
    buf = io.BytesIO()
    s.marshal(Temp("q"), buf)
    buf.seek(0)
    assert MsgPackSerializer().unmarshal(buf, Temp) == Temp("q")


def test_yaml_round_trip():
    s = get_serializer(YAML_SERIALIZER_NAME)
    data = s.marshal_bytes(Temp("yy"))
    assert data == b"AA: yy\n"
    assert YamlSerializer().unmarshal_bytes(data, Temp) == Temp("yy")


def test_registry_duplicate_and_replace():
    custom = BaseSerializer()
    register_serializer("test_custom_serializer", custom)
    with pytest.raises(ValueError):
        register_serializer("test_custom_serializer", BytesSerializer())
    replacement = BytesSerializer()
    register_serializer("test_custom_serializer", replacement, replace=True)
    assert get_serializer("test_custom_serializer") is replacement


def test_registry_missing():
    assert try_get_serializer("no_such_serializer") is None
    with pytest.raises(KeyError):
        get_serializer("no_such_serializer")


def test_registry_json_aliases():
    for name in ["jsoniter", "jsoniter_standard", "sonic", "sonic_std"]:
        assert get_serializer(name).marshal_bytes([1, "a"]) == b'[1,"a"]'