"""Start items in dependency order and close them in reverse."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Sequence


@dataclass
class Item:
    """A named unit with dependencies and optional start/close actions."""

    name: str
    depends_on: Sequence[str] = ()
    start: Callable[[], object] | None = None
    close: Callable[[], object] | None = None


class DependerError(Exception):
    """Raised when items cannot be started."""


class Depender:
    """Starts items once their dependencies are up; closes them newest first."""

    def __init__(self, items: Sequence[Item]) -> None:
        self._items = list(items)
        self._ready: set[str] = set()
        self._started: list[Item] = []

    @property
    def started(self) -> list[Item]:
        """Items started so far, in start order."""
        return list(self._started)

    def start(self) -> None:
        """Start every item after its dependencies.

        Raises DependerError on a likely dependency cycle or when an item fails.
        """
        max_rounds = len(self._items) * 10
        rounds = 0
        pending = deque(self._items)

        while len(self._started) < len(self._items):
            item = pending.popleft()

            rounds += 1
            if rounds > max_rounds:
                raise DependerError(f"There may be cyclic dependencies, item={item.name}")

            if not all(dep in self._ready for dep in item.depends_on or ()):
                pending.append(item)
                continue

            if item.start is not None:
                try:
                    item.start()
                except Exception as exc:
                    raise DependerError(f"start err. item={item.name}, err={exc}") from exc

            self._ready.add(item.name)
            self._started.append(item)

    def close(self) -> None:
        """Close started items in reverse start order."""
        for item in reversed(self._started):
            if item.close is not None:
                item.close()