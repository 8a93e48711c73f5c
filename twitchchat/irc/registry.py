"""Event kind -> handler table shared by a connection and its receive loop."""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from .models import EventKind

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection
    from .models import Message

Handler = Callable[["Connection", "Message"], Awaitable[Any] | Any]


class CallbackRegistry:
    """At most one handler per :class:`EventKind`.

    All access goes through one lock which is only held for the read or write
    of a single slot, never while a handler runs.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[EventKind, Handler] = {}

    def register(self, kind: EventKind, handler: Handler) -> None:
        if not isinstance(kind, EventKind):
            raise TypeError(f"kind must be an EventKind, got {type(kind).__name__}")
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            self._handlers[kind] = handler

    def unregister(self, kind: EventKind) -> Handler | None:
        with self._lock:
            return self._handlers.pop(kind, None)

    def get(self, kind: EventKind) -> Handler | None:
        with self._lock:
            return self._handlers.get(kind)

    def __contains__(self, kind: object) -> bool:
        with self._lock:
            return kind in self._handlers
