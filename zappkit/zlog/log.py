"""Building configured loggers: encoding, output targets and colouring hooks."""

from __future__ import annotations

import json
import os
import re
import sys
import threading
from datetime import timedelta
from typing import Any, Iterable, Optional

from ..lumberjack import RollingFile
from .color import Color, make_color_text
from .config import Level, LogConfig, parse_level
from .core import LOG_ID_KEY, TRACE_ID_KEY, Entry, Fields, Logger
from .hook import HookConfig, with_hook

_MAX_UINT64 = (1 << 64) - 1
_HEX_RE = re.compile(r"[0-9a-fA-F]+")

_LEVEL_COLORS = {
    Level.DEBUG: Color.MAGENTA,
    Level.INFO: Color.BLUE,
    Level.WARN: Color.YELLOW,
    Level.ERROR: Color.RED,
    Level.DPANIC: Color.RED,
    Level.PANIC: Color.RED,
    Level.FATAL: Color.RED,
}


class _StdoutTarget:
    """Writes encoded entries to whatever ``sys.stdout`` currently is."""

    def write(self, data: bytes) -> int:
        stream = sys.stdout
        if stream is not None:
            stream.write(data.decode("utf-8", "replace"))
        return len(data)

    def flush(self) -> None:
        if sys.stdout is not None:
            sys.stdout.flush()


class _MultiWriteSyncer:
    """Fans writes out to several targets under one lock."""

    def __init__(self, targets: Iterable[Any]) -> None:
        self.targets = list(targets)
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        with self._lock:
            for target in self.targets:
                target.write(data)
        return len(data)

    def sync(self) -> None:
        with self._lock:
            for target in self.targets:
                flush = getattr(target, "flush", None)
                if flush is not None:
                    flush()

    def close(self) -> None:
        with self._lock:
            for target in self.targets:
                if isinstance(target, RollingFile):
                    target.close()


class _Encoder:
    """Turns an entry and its fields into one line of console or JSON output."""

    def __init__(self, conf: LogConfig) -> None:
        self._conf = conf

    def _default(self, value: Any) -> Any:
        if isinstance(value, timedelta):
            if self._conf.millis_duration:
                return value / timedelta(milliseconds=1)
            return value // timedelta(microseconds=1) * 1000
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", "replace")
        return str(value)

    def _dumps(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, default=self._default)

    def _level_text(self, level: Level) -> str:
        text = level.value.upper() if self._conf.capital_level else level.value
        if not self._conf.json and self._conf.color:
            return make_color_text(_LEVEL_COLORS[level], text)
        return text

    def _caller_text(self, entry: Entry) -> Optional[str]:
        if not self._conf.show_file_and_linenum or entry.caller is None:
            return None
        return f"{entry.caller.file}:{entry.caller.line}"

    def encode(self, entry: Entry, fields: Fields) -> bytes:
        time_text = entry.time.strftime(self._conf.time_format)
        caller = self._caller_text(entry)
        if self._conf.json:
            record: dict[str, Any] = {"level": self._level_text(entry.level), "time": time_text}
            if caller is not None:
                record["linenum"] = caller
            record["msg"] = entry.message
            for key, value in fields:
                record[key] = value
            line = self._dumps(record)
        else:
            parts = [time_text, self._level_text(entry.level)]
            if caller is not None:
                parts.append(caller)
            parts.append(entry.message)
            if fields:
                parts.append(self._dumps(dict(fields)))
            line = "\t".join(parts)
        return (line + "\n").encode("utf-8")


class _Output:
    """The writer handed to a Logger: hooks, then encoding, then the syncer."""

    def __init__(
        self,
        encoder: _Encoder,
        syncer: _MultiWriteSyncer,
        hooks: Iterable[HookConfig],
        development: bool,
    ) -> None:
        self.syncer = syncer
        self._encoder = encoder
        self._development = development
        pipeline = self._emit
        for hook in hooks:
            pipeline = hook.wrap(pipeline)
        self._pipeline = pipeline

    def _emit(self, entry: Entry, fields: Fields) -> None:
        self.syncer.write(self._encoder.encode(entry, fields))

    def __call__(self, entry: Entry, fields: Fields) -> None:
        self._pipeline(entry, fields)
        if self._development and entry.level is Level.DPANIC:
            raise RuntimeError(entry.message)


def _make_write_syncer(conf: LogConfig) -> _MultiWriteSyncer:
    targets: list[Any] = []
    if conf.write_to_stream:
        targets.append(_StdoutTarget())
    if conf.write_to_file:
        try:
            os.makedirs(conf.path, exist_ok=True)
        except OSError as exc:
            raise OSError(f"cannot create log directory <{conf.path}>: {exc}") from exc
        name = conf.name
        if conf.append_pid:
            name = f"{name}_{os.getpid()}"
        targets.append(
            RollingFile(
                filename=f"{conf.path}/{name}.log",
                max_size=conf.file_max_size,
                max_backups=conf.file_max_backups_num,
                max_age=conf.file_max_durable_time,
                local_time=True,
                compress=conf.compress,
            )
        )
    return _MultiWriteSyncer(targets)


def make_color_message_of_logger_id(logger_id: str, message: str) -> str:
    """Colour ``message`` by a colour derived from a session ``logger_id``."""
    ident = 0
    for ch in logger_id:
        ident = (ident << 5) & 0xFFFFFFFF
        offset = 87 if ch >= "a" else 48
        ident = (ident + ord(ch) - offset) & 0xFFFFFFFF
    return make_color_text(Color(ident & 7), message)


def make_color_message_of_trace_id(trace_id: str, message: str) -> str:
    """Colour ``message`` by a colour derived from a hexadecimal ``trace_id``.

    An id that is not hexadecimal, or is zero, leaves the message as it is.
    """
    if not _HEX_RE.fullmatch(trace_id):
        return message
    tid = min(int(trace_id, 16), _MAX_UINT64)
    if tid == 0:
        return message
    return make_color_text(Color(tid & 7), message)


def _colour_by(key: str, colour: Any) -> HookConfig:
    def interceptor(entry: Entry, fields: Fields) -> bool:
        if not entry.message:
            return False
        for field_key, value in fields:
            if field_key == key:
                entry.message = colour(str(value), entry.message)
                break
        return False

    return with_hook(interceptor)


def new_logger(conf: Optional[LogConfig] = None, *hooks: Any) -> Logger:
    """Build a Logger from ``conf``.

    Extra arguments are HookConfig objects or bare interceptor functions; they
    wrap the output in the order given.
    """
    conf = conf if conf is not None else LogConfig()
    chain: list[HookConfig] = []
    if not conf.json and conf.color:
        chain.append(_colour_by(LOG_ID_KEY, make_color_message_of_logger_id))
        chain.append(_colour_by(TRACE_ID_KEY, make_color_message_of_trace_id))
    for hook in hooks:
        chain.append(hook if isinstance(hook, HookConfig) else with_hook(hook))

    output = _Output(_Encoder(conf), _make_write_syncer(conf), chain, conf.development_mode)
    return Logger(
        output,
        level=parse_level(conf.level.lower()),
        caller_min_level=parse_level(conf.show_file_and_linenum_min_level),
    )


def get_write_syncer(logger: Any) -> Optional[_MultiWriteSyncer]:
    """The output of a logger built by :func:`new_logger`, or None."""
    if isinstance(logger, Logger) and isinstance(logger.writer, _Output):
        return logger.writer.syncer
    return None


def add_fields(logger: Any, **fields: Any) -> bool:
    """Attach fields to ``logger``; False if it is not a Logger."""
    if isinstance(logger, Logger):
        logger.add_fields(**fields)
        return True
    return False


def remove_fields(logger: Any, count: int, *keys: str) -> Optional[int]:
    """Remove fields from ``logger`` (see Logger.remove_fields); None if it is not a Logger."""
    if isinstance(logger, Logger):
        return logger.remove_fields(count, *keys)
    return None