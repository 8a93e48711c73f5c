"""Line framing & handler dispatch."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

from ..constants import IRC_MAX_LINE_LENGTH
from ..logs.logger import logger
from .models import EventKind, Message
from .parser import parse_message

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection

LINE_TERMINATOR = b"\r\n"


class IRCDispatcher:
    """Turns received bytes into messages and runs the registered handlers."""

    def __init__(
        self, connection: Connection, max_line_length: int = IRC_MAX_LINE_LENGTH
    ):
        self.connection = connection
        self.max_line_length = max_line_length
        self._discarding = False

    async def process_incoming_data(self, buffer: bytes, new_data: bytes) -> bytes:
        """Dispatch every complete line and return the unterminated remainder.

        Stops as soon as the connection starts closing. An unterminated tail
        longer than ``max_line_length`` is dropped along with the rest of its
        line.
        """
        buffer += new_data
        if self._discarding:
            dropped, found, rest = buffer.partition(LINE_TERMINATOR)
            if not found:
                return b"\r" if dropped.endswith(b"\r") else b""
            self._discarding = False
            buffer = rest
        while LINE_TERMINATOR in buffer:
            if self.connection.closing:
                return buffer
            raw, buffer = buffer.split(LINE_TERMINATOR, 1)
            line = raw.decode("utf-8", errors="replace")
            if line.strip():
                await self.handle_line(line)
        if len(buffer) > self.max_line_length:
            logger.log_event(
                "irc",
                "line_too_long",
                level=logging.WARNING,
                user=self.connection.nickname,
                limit=self.max_line_length,
                size=len(buffer),
            )
            self._discarding = True
            # Keep a trailing CR so a terminator split across reads is still seen.
            return b"\r" if buffer.endswith(b"\r") else b""
        return buffer

    async def handle_line(self, line: str) -> Message:
        message = parse_message(line)
        logger.log_event(
            "irc",
            "raw",
            level=logging.DEBUG,
            user=self.connection.nickname,
            raw=line,
            command=message.context.command,
        )
        await self.dispatch(message)
        return message

    async def dispatch(self, message: Message) -> None:
        # Catch-all always runs before the command specific handler.
        await self._invoke(EventKind.ANY_MESSAGE, message)
        specific = EventKind.for_command(message.context.command)
        if specific is not None:
            await self._invoke(specific, message)

    async def _invoke(self, kind: EventKind, message: Message) -> None:
        handler = self.connection.registry.get(kind)
        if handler is None:
            return
        try:
            result = handler(self.connection, message)
            if inspect.isawaitable(result):
                await result
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "irc",
                "handler_error",
                level=logging.ERROR,
                user=self.connection.nickname,
                kind=kind.name,
                command=message.context.command,
                error=str(e),
                error_type=type(e).__name__,
            )
