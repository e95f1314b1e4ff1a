"""Serializers that turn values into bytes and back, with a registry of them by name."""

from __future__ import annotations

import abc
import base64
import dataclasses
import json
import math
import re
from decimal import Decimal
from typing import Any, BinaryIO

import msgpack
import yaml

BASE_SERIALIZER_NAME = "base"
BYTES_SERIALIZER_NAME = "bytes"
JSON_SERIALIZER_NAME = "json"
JSON_ITER_SERIALIZER_NAME = "jsoniter"
JSON_ITER_STANDARD_SERIALIZER_NAME = "jsoniter_standard"
SONIC_SERIALIZER_NAME = "sonic"
SONIC_STD_SERIALIZER_NAME = "sonic_std"
MSGPACK_SERIALIZER_NAME = "msgpack"
YAML_SERIALIZER_NAME = "yaml"

_INT_RE = re.compile(r"[+-]?[0-9]+\Z")

_TRUE_WORDS = frozenset(
    "1 t T true TRUE True y Y yes YES Yes on ON On ok OK Ok "
    "enabled ENABLED Enabled open OPEN Open".split()
)
_FALSE_WORDS = frozenset(
    "0 f F false FALSE False n N no NO No off OFF Off cancel CANCEL Cancel "
    "disable DISABLE Disable close CLOSE Close nil Nil NIL null Null NULL none None NONE".split()
) | {""}


class SerializeError(ValueError):
    """Raised when a value cannot be serialized or deserialized."""


class Serializer(abc.ABC):
    """Converts values to bytes and back.

    ``target`` names the type wanted on the way back: ``None`` for whatever the
    format produces, a builtin type, or a dataclass.
    """

    @abc.abstractmethod
    def marshal_bytes(self, value: Any) -> bytes:
        """Return ``value`` serialized as bytes."""

    @abc.abstractmethod
    def unmarshal_bytes(self, data: bytes, target: Any = None) -> Any:
        """Return the value decoded from ``data`` as ``target``."""

    def marshal(self, value: Any, writer: BinaryIO) -> None:
        """Write ``value`` serialized to ``writer``."""
        writer.write(self.marshal_bytes(value))

    def unmarshal(self, reader: BinaryIO, target: Any = None) -> Any:
        """Read everything from ``reader`` and decode it as ``target``."""
        return self.unmarshal_bytes(reader.read(), target)


def _field_key(f: dataclasses.Field) -> str:
    return f.metadata.get("name", f.name)


def _to_plain(value: Any) -> Any:
    """Turn dataclasses into dicts (keyed by field metadata ``name``) recursively."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {_field_key(f): _to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


def _type_name(value: Any) -> str:
    return type(value).__name__


def _from_plain(data: Any, target: Any, b64_bytes: bool = False) -> Any:
    """Convert decoded ``data`` into an instance of ``target``."""
    if target is None or target is Any or target is object:
        return data
    if dataclasses.is_dataclass(target) and isinstance(target, type):
        if not isinstance(data, dict):
            raise SerializeError(f"cannot decode {_type_name(data)} into {target.__name__}")
        kwargs = {}
        for f in dataclasses.fields(target):
            key = _field_key(f)
            if key not in data:
                continue
            sub = f.type
            if dataclasses.is_dataclass(sub) and isinstance(sub, type):
                kwargs[f.name] = _from_plain(data[key], sub, b64_bytes)
            else:
                kwargs[f.name] = data[key]
        try:
            return target(**kwargs)
        except TypeError as exc:
            raise SerializeError(str(exc)) from exc
    if target is bytes:
        if isinstance(data, (bytes, bytearray)):
            return bytes(data)
        if b64_bytes and isinstance(data, str):
            try:
                return base64.b64decode(data, validate=True)
            except ValueError as exc:
                raise SerializeError(str(exc)) from exc
        raise SerializeError(f"cannot decode {_type_name(data)} into bytes")
    if target is float:
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return float(data)
        raise SerializeError(f"cannot decode {_type_name(data)} into float")
    if target is int:
        if isinstance(data, int) and not isinstance(data, bool):
            return data
        raise SerializeError(f"cannot decode {_type_name(data)} into int")
    if isinstance(target, type):
        if isinstance(data, target):
            return data
        raise SerializeError(f"cannot decode {_type_name(data)} into {target.__name__}")
    raise SerializeError(f"unsupported target {target!r}")


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    raise TypeError(f"unsupported type: {_type_name(value)}")


def _format_float(value: float) -> str:
    """Shortest decimal form: plain for moderate magnitudes, exponent otherwise."""
    if not math.isfinite(value):
        raise SerializeError(f"unsupported value: {value!r}")
    text = repr(value)
    magnitude = abs(value)
    if magnitude != 0 and (magnitude < 1e-6 or magnitude >= 1e21):
        mantissa, _, exponent = text.partition("e")
        sign = exponent[0] if exponent[0] in "+-" else "+"
        digits = exponent.lstrip("+-").lstrip("0") or "0"
        return f"{mantissa}e{sign}{digits}"
    return format(Decimal(text).normalize(), "f")


class JsonSerializer(Serializer):
    """Compact JSON; bytes travel as base64 strings."""

    def marshal_bytes(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                _to_plain(value),
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
                default=_json_default,
            )
        except (TypeError, ValueError) as exc:
            raise SerializeError(str(exc)) from exc
        return text.encode("utf-8")

    def marshal(self, value: Any, writer: BinaryIO) -> None:
        writer.write(self.marshal_bytes(value) + b"\n")

    def unmarshal_bytes(self, data: bytes, target: Any = None) -> Any:
        try:
            decoded = json.loads(data)
        except (ValueError, UnicodeDecodeError) as exc:
            raise SerializeError(str(exc)) from exc
        return _from_plain(decoded, target, b64_bytes=True)


class MsgPackSerializer(Serializer):
    """MessagePack encoding."""

    def marshal_bytes(self, value: Any) -> bytes:
        try:
            return msgpack.packb(_to_plain(value), use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as exc:
            raise SerializeError(str(exc)) from exc

    def unmarshal_bytes(self, data: bytes, target: Any = None) -> Any:
        try:
            decoded = msgpack.unpackb(data, raw=False)
        except (ValueError, msgpack.UnpackException) as exc:
            raise SerializeError(str(exc)) from exc
        return _from_plain(decoded, target)


class YamlSerializer(Serializer):
    """YAML encoding."""

    def marshal_bytes(self, value: Any) -> bytes:
        try:
            text = yaml.safe_dump(_to_plain(value), allow_unicode=True, sort_keys=False)
        except yaml.YAMLError as exc:
            raise SerializeError(str(exc)) from exc
        return text.encode("utf-8")

    def unmarshal_bytes(self, data: bytes, target: Any = None) -> Any:
        try:
            decoded = yaml.safe_load(data)
        except yaml.YAMLError as exc:
            raise SerializeError(str(exc)) from exc
        return _from_plain(decoded, target)


class BytesSerializer(Serializer):
    """Passes bytes and strings through unchanged; anything else is an error."""

    @staticmethod
    def _to_bytes(value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, str):
            return value.encode("utf-8")
        raise SerializeError(f"a not bytes, it's {_type_name(value)}")

    def marshal_bytes(self, value: Any) -> bytes:
        return self._to_bytes(value)

    def unmarshal_bytes(self, data: bytes, target: Any = bytes) -> Any:
        if target is bytes:
            return bytes(data)
        if target is str:
            return bytes(data).decode("utf-8")
        raise SerializeError(f"a not bytes, it's {getattr(target, '__name__', target)!s}")

    def unmarshal(self, reader: BinaryIO, target: Any = bytes) -> Any:
        return self.unmarshal_bytes(reader.read(), target)


class BaseSerializer(Serializer):
    """Plain text for scalars; everything else goes through a fallback serializer."""

    def __init__(self, fallback: Serializer | None = None) -> None:
        self._fallback = fallback if fallback is not None else JsonSerializer()

    @staticmethod
    def _to_bool(text: str) -> bool:
        if text in _TRUE_WORDS:
            return True
        if text in _FALSE_WORDS:
            return False
        raise SerializeError(f'data "{text}" cannot be converted to bool')

    def marshal_bytes(self, value: Any) -> bytes:
        if value is None:
            return b""
        if isinstance(value, str):
            return value.encode("utf-8")
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, bool):
            return b"true" if value else b"false"
        if isinstance(value, int):
            return str(value).encode("ascii")
        if isinstance(value, float):
            return _format_float(value).encode("ascii")
        return self._fallback.marshal_bytes(value)

    def unmarshal_bytes(self, data: bytes, target: Any = None) -> Any:
        """Decode ``data`` as ``target``; a ``None`` target decodes to None."""
        if target is None:
            return None
        if target is bytes:
            return bytes(data)
        if target in (str, bool, int, float):
            try:
                text = bytes(data).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise SerializeError(str(exc)) from exc
            if target is str:
                return text
            if target is bool:
                return self._to_bool(text)
            if target is int:
                if not _INT_RE.match(text):
                    raise SerializeError(f"invalid syntax for int: {text!r}")
                return int(text)
            if text != text.strip() or not text:
                raise SerializeError(f"invalid syntax for float: {text!r}")
            try:
                return float(text.replace("_", "x") if "_" in text else text)
            except ValueError as exc:
                raise SerializeError(f"invalid syntax for float: {text!r}") from exc
        return self._fallback.unmarshal_bytes(data, target)


_serializers: dict[str, Serializer] = {
    BASE_SERIALIZER_NAME: BaseSerializer(JsonSerializer()),
    BYTES_SERIALIZER_NAME: BytesSerializer(),
    JSON_SERIALIZER_NAME: JsonSerializer(),
    JSON_ITER_SERIALIZER_NAME: JsonSerializer(),
    JSON_ITER_STANDARD_SERIALIZER_NAME: JsonSerializer(),
    SONIC_SERIALIZER_NAME: JsonSerializer(),
    SONIC_STD_SERIALIZER_NAME: JsonSerializer(),
    MSGPACK_SERIALIZER_NAME: MsgPackSerializer(),
    YAML_SERIALIZER_NAME: YamlSerializer(),
}


def register_serializer(name: str, serializer: Serializer, replace: bool = False) -> None:
    """Register ``serializer`` under ``name``; a duplicate name is an error unless ``replace``."""
    if not replace and name in _serializers:
        raise ValueError(f"serializer {name!r} is already registered")
    _serializers[name] = serializer


def get_serializer(name: str) -> Serializer:
    """Return the serializer registered as ``name``; raise KeyError if there is none."""
    try:
        return _serializers[name]
    except KeyError:
        raise KeyError(f"unregistered serializer: {name!r}") from None


def try_get_serializer(name: str) -> Serializer | None:
    """Return the serializer registered as ``name``, or None."""
    return _serializers.get(name)