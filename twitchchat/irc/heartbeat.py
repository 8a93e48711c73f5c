"""Outbound keep-alive PING task."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..errors import WriteError
from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection

KEEPALIVE_LINE = "PING"


class IRCHeartbeat:
    """Sends a bare ``PING`` every ``interval`` seconds until cancelled."""

    def __init__(self, connection: Connection, interval: float):
        if interval <= 0:
            raise ValueError("keep-alive interval must be positive")
        self.connection = connection
        self.interval = interval
        self.pings_sent = 0

    async def run(self) -> None:
        logger.log_event(
            "irc",
            "keepalive_start",
            level=logging.DEBUG,
            user=self.connection.nickname,
            interval=self.interval,
        )
        while not self.connection.closing:
            logger.log_event(
                "irc",
                "keepalive_ping",
                level=logging.DEBUG,
                user=self.connection.nickname,
                count=self.pings_sent + 1,
            )
            try:
                await self.connection.send(KEEPALIVE_LINE)
            except WriteError as e:
                logger.log_event(
                    "irc",
                    "keepalive_error",
                    level=logging.ERROR,
                    user=self.connection.nickname,
                    error=str(e),
                )
                return
            self.pings_sent += 1
            await asyncio.sleep(self.interval)
