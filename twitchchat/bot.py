"""Default chat handlers and session wiring for a configured client."""

from __future__ import annotations

import logging

from .config.model import ChatConfig
from .constants import KEEPALIVE_INTERVAL
from .irc import CallbackRegistry, Capability, Connection, EventKind, Message
from .logs.logger import logger

DEFAULT_PONG_TARGET = "tmi.twitch.tv"


async def answer_ping(connection: Connection, message: Message) -> None:
    """Reply to a server PING so Twitch keeps the session."""
    target = message.context.sender or message.body or DEFAULT_PONG_TARGET
    await connection.send(f"PONG :{target}")
    logger.log_event("chat", "pong", level=logging.DEBUG, user=connection.nickname)


def log_privmsg(connection: Connection, message: Message) -> None:
    channel = message.context.receiver.lstrip("#")
    is_own = (
        connection.nickname is not None
        and message.context.sender.lower() == connection.nickname
    )
    logger.log_event(
        "chat",
        "privmsg",
        level=logging.INFO if is_own else logging.DEBUG,
        user=connection.nickname,
        channel=channel,
        author=message.context.sender,
        text=message.body,
    )


def log_whisper(connection: Connection, message: Message) -> None:
    logger.log_event(
        "chat",
        "whisper",
        user=connection.nickname,
        author=message.context.sender,
        text=message.body,
    )


def log_any(connection: Connection, message: Message) -> None:
    if message.context.command in ("PING", "PRIVMSG", "WHISPER"):
        return
    logger.log_event(
        "chat",
        "event",
        level=logging.DEBUG,
        user=connection.nickname,
        command=message.context.command,
        sender=message.context.sender,
        receiver=message.context.receiver,
        body=message.body,
    )


class ChatBot:
    """Owns the handler table and knows how to bring a session up."""

    def __init__(
        self,
        config: ChatConfig,
        registry: CallbackRegistry | None = None,
        keepalive_interval: float = KEEPALIVE_INTERVAL,
    ) -> None:
        self.config = config
        self.registry = registry if registry is not None else CallbackRegistry()
        self.keepalive_interval = keepalive_interval
        self.install_default_handlers()

    def install_default_handlers(self) -> None:
        """Register the stock handlers for any kind that has none yet."""
        defaults = {
            EventKind.PING: answer_ping,
            EventKind.PRIVATE_MESSAGE: log_privmsg,
            EventKind.WHISPER: log_whisper,
            EventKind.ANY_MESSAGE: log_any,
        }
        for kind, handler in defaults.items():
            if kind not in self.registry:
                self.registry.register(kind, handler)

    async def start_session(self) -> Connection:
        """Connect, negotiate, authenticate, join every channel and start pinging.

        Raises:
            ConnectError: The transport could not be established.
        """
        server = self.config.server
        user = self.config.user
        connection = await Connection.open(
            server.address,
            server.port,
            server.ssl_tls,
            server.ssl_verify_mode,
            registry=self.registry,
        )
        try:
            await connection.request_capabilities(
                [Capability.TAGS, Capability.COMMANDS, Capability.MEMBERSHIP]
            )
            await connection.authenticate(user.token, user.nickname)
            channels = self.config.channels_to_join()
            logger.log_event(
                "chat", "joining", user=connection.nickname, count=len(channels)
            )
            for channel in channels:
                await connection.join_channel(channel)
            connection.keep_alive(self.keepalive_interval)
        except BaseException:
            await connection.close()
            raise
        return connection
