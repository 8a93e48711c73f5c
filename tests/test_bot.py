from __future__ import annotations

import asyncio
import socket

import pytest

from twitchchat.bot import ChatBot, answer_ping, log_any, log_privmsg, log_whisper
from twitchchat.config import ChatConfig
from twitchchat.errors import ConnectError
from twitchchat.irc.models import EventKind


def _config(port: int, **user) -> ChatConfig:
    user_data = {
        "token": "abcdefghij",
        "nickname": "MyBot",
        "main_channel": "main",
        "channels": ["extra1", "extra2"],
    }
    user_data.update(user)
    return ChatConfig.model_validate(
        {
            "server": {
                "address": "127.0.0.1",
                "port": port,
                "ssl_tls": False,
                "ssl_verify_mode": False,
            },
            "user": user_data,
        }
    )


def test_default_handlers_installed():
    bot = ChatBot(_config(6667))
    assert bot.registry.get(EventKind.PING) is answer_ping
    assert bot.registry.get(EventKind.PRIVATE_MESSAGE) is log_privmsg
    assert bot.registry.get(EventKind.WHISPER) is log_whisper
    assert bot.registry.get(EventKind.ANY_MESSAGE) is log_any


def test_custom_handlers_are_not_overridden():
    bot = ChatBot(_config(6667))

    def mine(connection, message):  # noqa: ARG001
        return None

    bot.registry.register(EventKind.PRIVATE_MESSAGE, mine)
    bot.install_default_handlers()
    assert bot.registry.get(EventKind.PRIVATE_MESSAGE) is mine


@pytest.mark.asyncio
async def test_start_session_handshake_order(irc_server):
    bot = ChatBot(_config(irc_server.port), keepalive_interval=60)
    conn = await bot.start_session()
    try:
        lines = await irc_server.wait_for_lines(9)
    finally:
        await conn.close()
    assert lines[:9] == [
        "CAP REQ :twitch.tv/tags",
        "CAP REQ :twitch.tv/commands",
        "CAP REQ :twitch.tv/membership",
        "PASS oauth:abcdefghij",
        "NICK MyBot",
        "JOIN #main",
        "JOIN #extra1",
        "JOIN #extra2",
        "PING",
    ]
    assert conn.registry is bot.registry


@pytest.mark.asyncio
async def test_server_ping_gets_pong(irc_server):
    bot = ChatBot(_config(irc_server.port, channels=[]), keepalive_interval=60)
    conn = await bot.start_session()
    try:
        before = len(await irc_server.wait_for_lines(7))
        await irc_server.push(b"PING :tmi.twitch.tv\r\n")
        lines = await irc_server.wait_for_lines(before + 1)
    finally:
        await conn.close()
    assert lines[before] == "PONG :tmi.twitch.tv"


@pytest.mark.asyncio
async def test_chat_traffic_is_handled_without_replies(irc_server):
    bot = ChatBot(_config(irc_server.port, channels=[]), keepalive_interval=60)
    seen = asyncio.Event()
    conn = await bot.start_session()
    original = bot.registry.get(EventKind.WHISPER)

    def whisper(connection, message):
        original(connection, message)
        seen.set()

    bot.registry.register(EventKind.WHISPER, whisper)
    try:
        before = len(await irc_server.wait_for_lines(7))
        await irc_server.push(
            b":a!a@a PRIVMSG #main :hello\r\n"
            b":mybot!mybot@mybot PRIVMSG #main :own line\r\n"
            b":tmi.twitch.tv 001 mybot :Welcome\r\n"
            b":a!a@a WHISPER mybot :psst\r\n"
        )
        await asyncio.wait_for(seen.wait(), 2)
        assert conn.is_receiving
    finally:
        await conn.close()
    assert len(irc_server.lines) == before


@pytest.mark.asyncio
async def test_start_session_connect_failure_propagates():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    bot = ChatBot(_config(port))
    with pytest.raises(ConnectError):
        await bot.start_session()
