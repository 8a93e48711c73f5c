"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class ConnectionState(Enum):
    CONNECTING = auto()
    OPEN = auto()
    RECEIVE_STOPPED = auto()
    CLOSED = auto()


@dataclass(frozen=True, slots=True)
class MessageContext:
    """Sender, verb and target of one protocol line.

    Every field defaults to an empty string; a missing token and an empty one
    cannot be told apart.
    """

    sender: str = ""
    command: str = ""
    receiver: str = ""


@dataclass(frozen=True, slots=True)
class Message:
    """One parsed protocol line.

    ``tags`` is the raw ``@key=value;...`` blob exactly as received.
    """

    tags: str = ""
    context: MessageContext = field(default_factory=MessageContext)
    body: str = ""


class Capability(Enum):
    TAGS = "tags"
    COMMANDS = "commands"
    MEMBERSHIP = "membership"

    def request(self) -> str:
        return f"CAP REQ :twitch.tv/{self.value}"


class EventKind(Enum):
    PING = auto()
    PRIVATE_MESSAGE = auto()
    WHISPER = auto()
    ANY_MESSAGE = auto()

    @classmethod
    def for_command(cls, command: str) -> EventKind | None:
        """Return the specific kind for a protocol verb, if it has one."""
        return _COMMAND_KINDS.get(command)


_COMMAND_KINDS = {
    "PING": EventKind.PING,
    "PRIVMSG": EventKind.PRIVATE_MESSAGE,
    "WHISPER": EventKind.WHISPER,
}
