import asyncio
import os
from contextlib import suppress

import pytest_asyncio

# Keep receive loops responsive so close() never waits on a long read.
os.environ.setdefault("IRC_READ_TIMEOUT", "0.2")


class FakeIRCServer:
    """Local TCP endpoint that records every line a client sends."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.writers: list[asyncio.StreamWriter] = []
        self.connections = 0
        self._changed = asyncio.Condition()
        self.server: asyncio.Server | None = None
        self.port = 0

    async def start(self) -> None:
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self.server.sockets[0].getsockname()[1]

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        async with self._changed:
            self.writers.append(writer)
            self.connections += 1
            self._changed.notify_all()
        buffer = b""
        try:
            while True:
                data = await reader.read(4096)
                if not data:
                    break
                buffer += data
                while b"\r\n" in buffer:
                    line, buffer = buffer.split(b"\r\n", 1)
                    async with self._changed:
                        self.lines.append(line.decode("utf-8"))
                        self._changed.notify_all()
        except ConnectionError:
            pass

    async def wait_for_clients(self, count: int = 1, timeout: float = 2.0) -> None:
        async def _wait() -> None:
            async with self._changed:
                await self._changed.wait_for(lambda: self.connections >= count)

        await asyncio.wait_for(_wait(), timeout)

    async def wait_for_lines(self, count: int, timeout: float = 2.0) -> list[str]:
        async def _wait() -> None:
            async with self._changed:
                await self._changed.wait_for(lambda: len(self.lines) >= count)

        await asyncio.wait_for(_wait(), timeout)
        return list(self.lines)

    async def push(self, data: bytes) -> None:
        """Send raw bytes to the most recent client."""
        await self.wait_for_clients()
        writer = self.writers[-1]
        writer.write(data)
        await writer.drain()

    async def drop_clients(self) -> None:
        for writer in self.writers:
            writer.close()
            with suppress(ConnectionError):
                await writer.wait_closed()

    async def stop(self) -> None:
        await self.drop_clients()
        if self.server is not None:
            self.server.close()
            with suppress(TimeoutError):
                await asyncio.wait_for(self.server.wait_closed(), timeout=1.0)


@pytest_asyncio.fixture
async def irc_server():
    server = FakeIRCServer()
    await server.start()
    yield server
    await server.stop()
