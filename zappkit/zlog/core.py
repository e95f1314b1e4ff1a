"""The logger: builds entries from loose arguments and hands them to a writer."""

from __future__ import annotations

import math
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .config import Level, parse_level

LOG_ID_KEY = "logID"
TRACE_ID_KEY = "traceID"
SPAN_ID_KEY = "spanID"
LOG_DATA_KEY = "logData"

Fields = List[Tuple[str, Any]]

_ID_DIGITS = "0123456789abcdefghijklmnopqrstuv"
_id_lock = threading.Lock()
_last_id = 0


def next_logger_id() -> str:
    """Next session id: a counter written in base 32, padded to 7 characters."""
    global _last_id
    with _id_lock:
        _last_id = (_last_id + 1) & 0xFFFFFFFF
        n = _last_id
    digits = []
    while True:
        digits.append(_ID_DIGITS[n & 31])
        if n < 32:
            break
        n >>= 5
    return "".join(reversed(digits)).rjust(7, "0")


@dataclass(frozen=True)
class CustomCaller:
    """A source location to report instead of the real caller."""

    function: str
    file: str
    line: int


def with_caller(function: str, file: str, line: int) -> CustomCaller:
    """An argument that makes the entry report the given source location."""
    return CustomCaller(function, file, line)


@dataclass
class Entry:
    """One log record as handed to a writer."""

    level: Level
    message: str
    time: datetime = field(default_factory=datetime.now)
    caller: Optional[CustomCaller] = None


Writer = Callable[[Entry, Fields], None]


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    dec = Decimal(repr(value)).normalize()
    sign, digits, exponent = dec.as_tuple()
    sci = len(digits) + exponent - 1
    if sci < -4 or sci >= 6:
        mantissa = "".join(map(str, digits))
        body = mantissa[0] + ("." + mantissa[1:] if len(mantissa) > 1 else "")
        return f"{'-' if sign else ''}{body}e{'-' if sci < 0 else '+'}{abs(sci):02d}"
    return format(dec, "f")


def _format_operand(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


def _sprint(args: Iterable[Any]) -> str:
    """Join operands, with a space between two neighbours that are not strings."""
    parts: list[str] = []
    prev_is_str = True
    for index, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if index and not is_str and not prev_is_str:
            parts.append(" ")
        parts.append(_format_operand(arg))
        prev_is_str = is_str
    return "".join(parts)


def _as_fields(fields: Any) -> Fields:
    if fields is None:
        return []
    if isinstance(fields, Mapping):
        return list(fields.items())
    return [(key, value) for key, value in fields]


class Logger:
    """A levelled logger with attached fields.

    Positional arguments of str, bool, int and float make up the message;
    mappings add fields; a :func:`with_caller` value sets the reported caller;
    anything else is attached under ``logData``. ``panic`` raises RuntimeError
    and ``fatal`` raises SystemExit after writing.
    """

    def __init__(
        self,
        writer: Writer,
        level: Level | str = Level.DEBUG,
        caller_min_level: Level | str = Level.DEBUG,
        fields: Any = None,
    ) -> None:
        self.writer = writer
        self.level = parse_level(level)
        self.caller_min_level = parse_level(caller_min_level)
        self._fields: Fields = _as_fields(fields)

    @property
    def fields(self) -> Fields:
        """The fields attached to every entry."""
        return list(self._fields)

    def _make_body(self, args: Iterable[Any]) -> tuple[str, Fields, Optional[CustomCaller]]:
        operands: list[Any] = []
        fields = list(self._fields)
        custom: Optional[CustomCaller] = None
        for arg in args:
            if isinstance(arg, CustomCaller):
                custom = arg
            elif isinstance(arg, Mapping):
                fields.extend(arg.items())
            elif isinstance(arg, (str, bool, int, float)):
                operands.append(arg)
            else:
                fields.append((LOG_DATA_KEY, arg))
        return _sprint(operands), fields, custom

    @staticmethod
    def _find_caller() -> Optional[CustomCaller]:
        try:
            frame = sys._getframe(3)
        except ValueError:
            return None
        return CustomCaller(frame.f_code.co_name, frame.f_code.co_filename, frame.f_lineno)

    def _print(self, level: Level | str, args: tuple[Any, ...]) -> None:
        level = parse_level(level)
        message, fields, custom = self._make_body(args)
        if level.severity >= self.level.severity:
            caller = custom if custom is not None else self._find_caller()
            if level.severity < self.caller_min_level.severity:
                caller = None
            self.writer(Entry(level, message, caller=caller), fields)
        if level is Level.PANIC:
            raise RuntimeError(message)
        if level is Level.FATAL:
            raise SystemExit(1)

    def log(self, level: Level | str, *args: Any) -> None:
        self._print(level, args)

    def debug(self, *args: Any) -> None:
        self._print(Level.DEBUG, args)

    def info(self, *args: Any) -> None:
        self._print(Level.INFO, args)

    def warn(self, *args: Any) -> None:
        self._print(Level.WARN, args)

    def error(self, *args: Any) -> None:
        self._print(Level.ERROR, args)

    def dpanic(self, *args: Any) -> None:
        self._print(Level.DPANIC, args)

    def panic(self, *args: Any) -> None:
        self._print(Level.PANIC, args)

    def fatal(self, *args: Any) -> None:
        self._print(Level.FATAL, args)

    def add_fields(self, **fields: Any) -> None:
        """Attach fields to every later entry."""
        self._fields = self._fields + list(fields.items())

    def remove_fields(self, count: int, *keys: str) -> int:
        """Remove fields with the given keys; at most ``count`` of them if ``count`` >= 1.

        Returns how many were removed.
        """
        if not self._fields or not keys:
            return 0
        wanted = set(keys)
        kept: Fields = []
        removed = 0
        for index, item in enumerate(self._fields):
            if item[0] not in wanted:
                kept.append(item)
                continue
            removed += 1
            if count >= 1 and removed == count:
                kept.extend(self._fields[index + 1 :])
                break
        self._fields = kept
        return removed

    def new_session_logger(self, **fields: Any) -> Logger:
        """A logger sharing this one's output, tagged with a fresh ``logID``."""
        return Logger(
            self.writer,
            self.level,
            self.caller_min_level,
            [*self._fields, (LOG_ID_KEY, next_logger_id()), *fields.items()],
        )