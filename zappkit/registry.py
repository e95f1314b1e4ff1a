"""Lifecycle handlers and registries of plugin and service creators."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable


class HandlerType(IntEnum):
    """Points in the application lifecycle at which handlers run."""

    BEFORE_INITIALIZE = 1
    BEFORE_MAKE_COMPONENT = 2
    AFTER_MAKE_COMPONENT = 3
    BEFORE_MAKE_PLUGIN = 4
    AFTER_MAKE_PLUGIN = 5
    BEFORE_MAKE_FILTER = 6
    AFTER_MAKE_FILTER = 7
    BEFORE_MAKE_SERVICE = 8
    AFTER_MAKE_SERVICE = 9
    AFTER_INITIALIZE = 10

    BEFORE_START = 11
    BEFORE_START_PLUGIN = 12
    AFTER_START_PLUGIN = 13
    BEFORE_START_SERVICE = 14
    AFTER_START_SERVICE = 15
    AFTER_START = 16

    BEFORE_EXIT = 17
    BEFORE_CLOSE_SERVICE = 18
    AFTER_CLOSE_SERVICE = 19
    BEFORE_CLOSE_FILTER = 20
    AFTER_CLOSE_FILTER = 21
    BEFORE_CLOSE_PLUGIN = 22
    AFTER_CLOSE_PLUGIN = 23
    BEFORE_CLOSE_COMPONENT = 24
    AFTER_CLOSE_COMPONENT = 25
    AFTER_EXIT = 26


Handler = Callable[[Any, HandlerType], object]

_handlers: dict[HandlerType, list[Handler]] = {}


def add_handler(handler_type: HandlerType, *handlers: Handler) -> None:
    """Register global handlers for ``handler_type``."""
    _handlers.setdefault(HandlerType(handler_type), []).extend(handlers)


def trigger(app: Any, handler_type: HandlerType) -> None:
    """Call every handler registered for ``handler_type`` in registration order."""
    handler_type = HandlerType(handler_type)
    for handler in list(_handlers.get(handler_type, ())):
        handler(app, handler_type)


class RegistryError(Exception):
    """Raised on a duplicate registration or an unknown creator."""


class CreatorRegistry:
    """Creators of one kind of component, keyed by type name.

    A creator is a callable taking the app, or an object with ``create(app)``.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._creators: dict[str, Any] = {}

    def register(self, name: str, creator: Any) -> None:
        """Register ``creator`` for ``name``; registering a name twice is an error."""
        if name in self._creators:
            raise RegistryError(f"duplicate {self.kind} creator: {name}")
        self._creators[name] = creator

    def make(self, app: Any, name: str) -> Any:
        """Build the component ``name`` for ``app``."""
        try:
            creator = self._creators[name]
        except KeyError:
            raise RegistryError(f"{self.kind} has no registered creator: {name}") from None
        create = getattr(creator, "create", creator)
        return create(app)

    def __contains__(self, name: object) -> bool:
        return name in self._creators


PLUGIN_CREATORS = CreatorRegistry("plugin")
SERVICE_CREATORS = CreatorRegistry("service")