"""Connection to a Twitch chat server: transport, send helpers, background tasks."""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections.abc import Iterable
from contextlib import suppress

from ..constants import IRC_CONNECT_TIMEOUT, IRC_READ_CHUNK_SIZE, TWITCH_IRC_HOST
from ..errors import ConnectError, WriteError
from ..logs.logger import logger
from .dispatcher import IRCDispatcher
from .heartbeat import IRCHeartbeat
from .listener import IRCListener
from .models import Capability, ConnectionState, EventKind
from .registry import CallbackRegistry, Handler

LINE_ENDING = "\r\n"


def build_tls_context(verify_peer: bool) -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    if not verify_peer:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class Connection:  # pylint: disable=too-many-instance-attributes
    """One chat session over one transport.

    Created by :meth:`open`; not restartable. Handlers receive this same
    object, so anything they send goes out on the live socket.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        registry: CallbackRegistry | None = None,
        *,
        chunk_size: int = IRC_READ_CHUNK_SIZE,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.registry = registry if registry is not None else CallbackRegistry()
        self.nickname: str | None = None
        self.state = ConnectionState.CONNECTING
        self.closing = False
        self._write_lock = asyncio.Lock()
        self.dispatcher = IRCDispatcher(self)
        self.listener = IRCListener(self, chunk_size=chunk_size)
        self.heartbeat: IRCHeartbeat | None = None
        self._receive_task: asyncio.Task[None] | None = None
        self._keepalive_task: asyncio.Task[None] | None = None

    @classmethod
    async def open(
        cls,
        host: str,
        port: int,
        use_tls: bool,
        verify_peer: bool = True,
        *,
        registry: CallbackRegistry | None = None,
        tls_server_name: str = TWITCH_IRC_HOST,
        connect_timeout: float = IRC_CONNECT_TIMEOUT,
    ) -> Connection:
        """Open the transport and start the receive loop.

        Raises:
            ConnectError: TCP connect or TLS handshake failed or timed out.
        """
        logger.log_event(
            "irc", "connect_start", server=host, port=port, tls=use_tls
        )
        tls_context: ssl.SSLContext | None = None
        if use_tls:
            logger.log_event("irc", "tls_mode")
            tls_context = build_tls_context(verify_peer)
            if not verify_peer:
                logger.log_event("irc", "tls_verify_disabled", level=logging.WARNING)
        else:
            logger.log_event("irc", "clear_mode", level=logging.WARNING)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(
                    host,
                    port,
                    ssl=tls_context,
                    server_hostname=tls_server_name if tls_context else None,
                ),
                timeout=connect_timeout,
            )
        except (TimeoutError, OSError) as e:
            # ssl.SSLError is an OSError subclass.
            error = str(e) or type(e).__name__
            logger.log_event(
                "irc",
                "connect_failed",
                level=logging.ERROR,
                server=host,
                port=port,
                error=error,
                error_type=type(e).__name__,
            )
            raise ConnectError(
                f"could not connect to {host}:{port}: {error}",
                data={"host": host, "port": port, "tls": use_tls},
            ) from e

        connection = cls(reader, writer, registry)
        connection._start_receiving()
        logger.log_event("irc", "connect_success", server=host, port=port)
        return connection

    def _start_receiving(self) -> None:
        self._set_state(ConnectionState.OPEN)
        self._receive_task = asyncio.create_task(
            self.listener.listen(), name="irc-receive"
        )

    def _set_state(self, new_state: ConnectionState) -> None:
        if self.state != new_state:
            logger.log_event(
                "irc",
                "state_change",
                level=logging.DEBUG,
                user=self.nickname,
                old_state=self.state.name,
                new_state=new_state.name,
            )
            self.state = new_state

    @property
    def is_receiving(self) -> bool:
        return self._receive_task is not None and not self._receive_task.done()

    def register(self, kind: EventKind, handler: Handler) -> None:
        self.registry.register(kind, handler)

    async def send(self, line: str) -> None:
        """Write one protocol line; concurrent callers never interleave.

        Raises:
            WriteError: The connection is closed or the write failed.
        """
        if self.closing or self.writer.is_closing():
            raise WriteError("connection is closed", data={"line": _mask(line)})
        logger.log_event(
            "irc", "send", level=logging.DEBUG, user=self.nickname, line=_mask(line)
        )
        payload = f"{line}{LINE_ENDING}".encode()
        async with self._write_lock:
            try:
                self.writer.write(payload)
                await self.writer.drain()
            except (OSError, RuntimeError) as e:
                raise WriteError(
                    f"write failed: {e}", data={"line": _mask(line)}
                ) from e

    async def authenticate(self, token: str, nickname: str) -> None:
        token = token.removeprefix("oauth:")
        self.nickname = nickname.lower()
        await self.send(f"PASS oauth:{token}")
        await self.send(f"NICK {nickname}")

    async def join_channel(self, name: str) -> None:
        await self.send(f"JOIN #{name.lstrip('#')}")

    async def request_capabilities(self, capabilities: Iterable[Capability]) -> None:
        for capability in capabilities:
            await self.send(capability.request())

    async def send_privmsg(self, target: str, text: str) -> None:
        await self.send(f"PRIVMSG {target} :{text}")

    def keep_alive(self, interval: float) -> asyncio.Task[None]:
        """Start (or restart) the periodic PING task; it stops on :meth:`close`."""
        heartbeat = IRCHeartbeat(self, interval)
        if self._keepalive_task is not None and not self._keepalive_task.done():
            self._keepalive_task.cancel()
        self.heartbeat = heartbeat
        self._keepalive_task = asyncio.create_task(
            heartbeat.run(), name="irc-keepalive"
        )
        return self._keepalive_task

    async def wait_receive_stopped(self) -> None:
        """Return once the receive loop has ended for any reason."""
        if self._receive_task is not None:
            await asyncio.wait({self._receive_task})

    async def close(self) -> None:
        if self.closing:
            return
        self.closing = True
        current = asyncio.current_task()
        tasks = [
            t
            for t in (self._receive_task, self._keepalive_task)
            if t is not None and t is not current and not t.done()
        ]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task
        self.writer.close()
        with suppress(OSError):
            await self.writer.wait_closed()
        self._set_state(ConnectionState.CLOSED)
        logger.log_event("irc", "closed", user=self.nickname)

    async def __aenter__(self) -> Connection:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def _mask(line: str) -> str:
    if line.startswith("PASS "):
        return "PASS oauth:***"
    return line
