"""IRC subsystem package.

Contains the message model and parser, the callback registry, and the
connection with its receive loop, dispatcher and keep-alive task.
"""

from .connection import Connection  # noqa: F401
from .dispatcher import IRCDispatcher  # noqa: F401
from .heartbeat import IRCHeartbeat  # noqa: F401
from .listener import IRCListener  # noqa: F401
from .models import (  # noqa: F401
    Capability,
    ConnectionState,
    EventKind,
    Message,
    MessageContext,
)
from .parser import parse_message  # noqa: F401
from .registry import CallbackRegistry, Handler  # noqa: F401

__all__ = [
    "CallbackRegistry",
    "Capability",
    "Connection",
    "ConnectionState",
    "EventKind",
    "Handler",
    "IRCDispatcher",
    "IRCHeartbeat",
    "IRCListener",
    "Message",
    "MessageContext",
    "parse_message",
]
