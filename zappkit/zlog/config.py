"""Log levels and logger configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Level(str, Enum):
    """Log levels, from least to most severe."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    DPANIC = "dpanic"
    PANIC = "panic"
    FATAL = "fatal"

    @property
    def severity(self) -> int:
        """Numeric rank; larger is more severe."""
        return _SEVERITY[self]


_SEVERITY = {
    Level.DEBUG: -1,
    Level.INFO: 0,
    Level.WARN: 1,
    Level.ERROR: 2,
    Level.DPANIC: 3,
    Level.PANIC: 4,
    Level.FATAL: 5,
}


def parse_level(level: Any) -> Level:
    """Return the Level named by ``level``; anything unknown means INFO."""
    try:
        return Level(level)
    except ValueError:
        return Level.INFO


@dataclass
class LogConfig:
    """Logger settings; the defaults describe a development console logger."""

    level: str = "debug"
    json: bool = False
    write_to_stream: bool = True
    write_to_file: bool = False
    name: str = "zlog"
    append_pid: bool = False
    path: str = "./log"
    file_max_size: int = 32
    file_max_backups_num: int = 3
    file_max_durable_time: int = 7
    compress: bool = False
    time_format: str = "%Y-%m-%d %H:%M:%S"
    color: bool = True
    capital_level: bool = False
    development_mode: bool = True
    show_file_and_linenum: bool = True
    show_file_and_linenum_min_level: str = "debug"
    millis_duration: bool = True