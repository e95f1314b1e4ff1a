"""Interceptors that can rewrite or drop log entries before they are written."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Tuple

Fields = List[Tuple[str, Any]]
Interceptor = Callable[[Any, Fields], bool]
Writer = Callable[[Any, Fields], None]


@dataclass
class HookConfig:
    """Interceptor functions and callbacks run when the hook is first attached.

    An interceptor receives the entry and its fields; it may change the entry,
    and returning True drops the entry.
    """

    interceptors: list[Interceptor] = field(default_factory=list)
    start_callbacks: list[Callable[[], object]] = field(default_factory=list)
    _started: bool = field(default=False, init=False, repr=False)

    def add_start_hook_callbacks(self, *callbacks: Callable[[], object]) -> HookConfig:
        """Add callbacks run the first time the hook wraps a writer."""
        self.start_callbacks.extend(callbacks)
        return self

    def add_interceptor_func(self, *fns: Interceptor) -> HookConfig:
        """Add interceptor functions, run in the order added."""
        self.interceptors.extend(fns)
        return self

    def wrap(self, writer: Writer) -> Writer:
        """Return a writer that runs the interceptors before ``writer``."""
        if not self._started:
            self._started = True
            for callback in self.start_callbacks:
                callback()

        def hooked(entry: Any, fields: Fields) -> None:
            for fn in self.interceptors:
                if fn(entry, fields):
                    return
            writer(entry, fields)

        return hooked


def with_hook(*fns: Interceptor) -> HookConfig:
    """A HookConfig holding the given interceptors."""
    return HookConfig().add_interceptor_func(*fns)