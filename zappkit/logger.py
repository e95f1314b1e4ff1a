"""The process-wide logger and shortcuts that write through it."""

from __future__ import annotations

import dataclasses
import sys
from typing import Any, Optional

from .utils import is_zero
from .zlog.config import LogConfig
from .zlog.core import CustomCaller, Logger
from .zlog.log import new_logger

_log: Logger = new_logger(LogConfig())


def new_app_logger(app_name: str, conf: Optional[LogConfig] = None) -> Logger:
    """Build the application logger and make it the process-wide one.

    A missing or all-zero ``conf`` takes the defaults; an empty name becomes
    ``app_name``. The settings used are written back into ``conf``.
    """
    global _log
    if conf is None:
        conf = LogConfig(name=app_name)
    elif is_zero(conf):
        default = LogConfig(name=app_name)
        for f in dataclasses.fields(conf):
            setattr(conf, f.name, getattr(default, f.name))
    if not conf.name:
        conf.name = app_name
    _log = new_logger(conf)
    return _log


def get_logger() -> Logger:
    """The current process-wide logger."""
    return _log


def _caller() -> CustomCaller:
    frame = sys._getframe(2)
    return CustomCaller(frame.f_code.co_name, frame.f_code.co_filename, frame.f_lineno)


def debug(*args: Any) -> None:
    _log.debug(_caller(), *args)


def info(*args: Any) -> None:
    _log.info(_caller(), *args)


def warn(*args: Any) -> None:
    _log.warn(_caller(), *args)


def error(*args: Any) -> None:
    _log.error(_caller(), *args)


def panic(*args: Any) -> None:
    """Log at panic level, then raise RuntimeError."""
    _log.panic(_caller(), *args)


def fatal(*args: Any) -> None:
    """Log at fatal level, then raise SystemExit."""
    _log.fatal(_caller(), *args)