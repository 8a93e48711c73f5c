"""Receive loop: read, frame, parse, dispatch until the transport dies."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..constants import IRC_READ_CHUNK_SIZE, IRC_READ_TIMEOUT
from ..errors import FatalReadError
from ..logs.logger import logger
from .models import ConnectionState

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection


class IRCListener:
    """Owns the read loop and delegates framing & dispatch to the dispatcher."""

    def __init__(
        self,
        connection: Connection,
        chunk_size: int = IRC_READ_CHUNK_SIZE,
        read_timeout: float = IRC_READ_TIMEOUT,
    ):
        self.connection = connection
        self.chunk_size = chunk_size
        self.read_timeout = read_timeout
        self.buffer = b""
        self.error: FatalReadError | None = None

    async def listen(self) -> None:
        logger.log_event(
            "irc", "listener_start", level=logging.DEBUG, user=self.connection.nickname
        )
        try:
            while not self.connection.closing:
                data = await self._read_chunk()
                if data is None:
                    continue
                if not data:
                    logger.log_event(
                        "irc",
                        "connection_lost",
                        level=logging.ERROR,
                        user=self.connection.nickname,
                    )
                    break
                self.buffer = await self.connection.dispatcher.process_incoming_data(
                    self.buffer, data
                )
        except FatalReadError as e:
            self.error = e
            logger.log_event(
                "irc",
                "read_error",
                level=logging.ERROR,
                user=self.connection.nickname,
                error=str(e),
                error_type=type(e.__cause__).__name__,
            )
        finally:
            self._finalize_listening()

    async def _read_chunk(self) -> bytes | None:
        """Read one chunk; ``None`` means the read timed out and nothing arrived."""
        reader = self.connection.reader
        try:
            return await asyncio.wait_for(
                reader.read(self.chunk_size), timeout=self.read_timeout
            )
        except TimeoutError:
            return None
        except (OSError, asyncio.IncompleteReadError) as e:
            raise FatalReadError(str(e) or type(e).__name__) from e

    def _finalize_listening(self) -> None:
        if not self.connection.closing:
            self.connection._set_state(ConnectionState.RECEIVE_STOPPED)  # noqa: SLF001
        logger.log_event(
            "irc",
            "listener_stopped",
            level=logging.DEBUG,
            user=self.connection.nickname,
        )
