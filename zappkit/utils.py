"""Small helpers: wildcard matching, zero-value checks, panic capture, parallel calls."""

from __future__ import annotations

import dataclasses
import queue
import threading
import traceback
from collections.abc import Sized
from dataclasses import dataclass
from typing import Any, Callable, Iterable

_STACK_DEPTH = 16


def is_match_wildcard(text: str, pattern: str) -> bool:
    """Match ``text`` against ``pattern``: ``?`` is one character, ``*`` any run."""
    prev = [True] + [False] * len(pattern)
    for j, p in enumerate(pattern, 1):
        if p != "*":
            break
        prev[j] = True

    for ch in text:
        row = [False] * (len(pattern) + 1)
        for j, p in enumerate(pattern, 1):
            if p == "*":
                row[j] = row[j - 1] or prev[j]
            elif p == "?" or p == ch:
                row[j] = prev[j - 1]
        prev = row
    return prev[-1]


def is_match_wildcard_any(text: str, *patterns: str) -> bool:
    """True if ``text`` matches any of ``patterns``."""
    return any(is_match_wildcard(text, p) for p in patterns)


def is_zero(value: Any) -> bool:
    """True if ``value`` is the zero value of its type."""
    if value is None:
        return True
    if isinstance(value, (bool, int, float, complex)):
        return value == 0
    if isinstance(value, (str, bytes, bytearray)):
        return len(value) == 0
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(is_zero(getattr(value, f.name)) for f in dataclasses.fields(value))
    if isinstance(value, tuple):
        return all(is_zero(v) for v in value)
    if isinstance(value, Sized):
        return len(value) == 0
    try:
        default = type(value)()
    except Exception:
        return False
    return value == default


def ternary(condition: bool, first: Any, second: Any) -> Any:
    """Return ``first`` if ``condition`` is true, else ``second``."""
    return first if condition else second


def first_non_zero(*values: Any) -> Any:
    """Return the first value that is not zero, else the last value (None if empty)."""
    last = None
    for last in values:
        if not is_zero(last):
            return last
    return last


@dataclass(frozen=True)
class Caller:
    """One frame of a captured stack."""

    function: str
    file: str
    line: int


class RecoverError(Exception):
    """An exception caught by :func:`wrap_call`, with the stack where it was raised."""

    def __init__(self, err: BaseException, callers: Iterable[Caller] = ()) -> None:
        super().__init__(str(err))
        self.err = err
        self.callers = list(callers)

    def __str__(self) -> str:
        return str(self.err)


def wrap_call(fn: Callable[[], Any]) -> Any:
    """Call ``fn`` and return its result; any exception is re-raised as RecoverError."""
    try:
        return fn()
    except RecoverError:
        raise
    except Exception as exc:
        frames = traceback.extract_tb(exc.__traceback__)[1:]
        callers = [Caller(f.name, f.filename, f.lineno or 0) for f in reversed(frames)]
        raise RecoverError(exc, callers[:_STACK_DEPTH]) from exc


def is_recover_error(error: BaseException) -> bool:
    """True if ``error`` was produced by :func:`wrap_call`."""
    return isinstance(error, RecoverError)


def get_recover_errors(error: BaseException) -> list[str]:
    """The message of ``error`` followed by one line per captured frame."""
    if not isinstance(error, RecoverError):
        return [str(error)]
    return [str(error), *(f"{c.file}:{c.line}  {c.function}" for c in error.callers)]


def get_recover_error_detail(error: BaseException) -> str:
    """The lines of :func:`get_recover_errors` joined by newlines."""
    return "\n".join(get_recover_errors(error))


def go_and_wait(*fns: Callable[[], Any]) -> None:
    """Run every function in its own thread and wait for all.

    If any raised, the first error to arrive is raised as RecoverError.
    """
    if not fns:
        return

    errors: queue.SimpleQueue[RecoverError] = queue.SimpleQueue()

    def run(fn: Callable[[], Any]) -> None:
        try:
            wrap_call(fn)
        except RecoverError as exc:
            errors.put(exc)

    threads = [threading.Thread(target=run, args=(fn,), daemon=True) for fn in fns]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    if not errors.empty():
        raise errors.get()