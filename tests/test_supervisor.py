from __future__ import annotations

import asyncio
import warnings
from types import SimpleNamespace

import pytest

from twitchchat.errors import ConnectError, ReconnectExhaustedError, WriteError
from twitchchat.irc.connection import Connection
from twitchchat.irc.models import ConnectionState
from twitchchat.supervisor import SessionSupervisor

FAST = {"base_delay": 0.01, "max_delay": 0.02, "jitter": 0}


async def _until(predicate, timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)


@pytest.mark.asyncio
async def test_retries_connect_errors_then_runs_session(irc_server):
    attempts = 0
    opened: list[Connection] = []

    async def factory() -> Connection:
        nonlocal attempts
        attempts += 1
        if attempts < 3:
            raise ConnectError("refused")
        conn = await Connection.open("127.0.0.1", irc_server.port, use_tls=False)
        opened.append(conn)
        return conn

    sup = SessionSupervisor(factory, max_attempts=5, **FAST)
    runner = asyncio.create_task(sup.run_forever())
    await _until(lambda: sup.sessions_started == 1)
    assert sup.connection is opened[0]
    sup.stop()
    await asyncio.wait_for(runner, 2)

    assert attempts == 3
    assert sup.sessions_started == 1
    assert sup.connection is None
    assert opened[0].state is ConnectionState.CLOSED


@pytest.mark.asyncio
async def test_write_errors_during_handshake_are_retried(irc_server):
    attempts = 0

    async def factory() -> Connection:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise WriteError("peer went away")
        return await Connection.open("127.0.0.1", irc_server.port, use_tls=False)

    sup = SessionSupervisor(factory, max_attempts=3, **FAST)
    runner = asyncio.create_task(sup.run_forever())
    await _until(lambda: sup.sessions_started == 1)
    sup.stop()
    await asyncio.wait_for(runner, 2)
    assert attempts == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts():
    attempts = 0

    async def factory() -> Connection:
        nonlocal attempts
        attempts += 1
        raise ConnectError("refused")

    sup = SessionSupervisor(factory, max_attempts=3, **FAST)
    with pytest.raises(ReconnectExhaustedError) as exc:
        await asyncio.wait_for(sup.run_forever(), 2)
    assert attempts == 3
    assert exc.value.attempts == 3
    assert isinstance(exc.value.final_exception, ConnectError)


@pytest.mark.asyncio
async def test_reconnects_when_session_receive_loop_ends(irc_server):
    async def factory() -> Connection:
        return await Connection.open("127.0.0.1", irc_server.port, use_tls=False)

    sup = SessionSupervisor(factory, max_attempts=3, **FAST)
    runner = asyncio.create_task(sup.run_forever())
    await _until(lambda: sup.sessions_started == 1)
    first = sup.connection
    await irc_server.wait_for_clients(1)
    await irc_server.drop_clients()
    await _until(lambda: sup.sessions_started == 2)
    await irc_server.wait_for_clients(2)
    sup.stop()
    await asyncio.wait_for(runner, 2)

    assert first is not None
    assert first.state is ConnectionState.CLOSED
    assert irc_server.connections == 2


@pytest.mark.asyncio
async def test_stop_interrupts_backoff_wait():
    attempts = 0

    async def factory() -> Connection:
        nonlocal attempts
        attempts += 1
        raise ConnectError("refused")

    sup = SessionSupervisor(factory, max_attempts=0, base_delay=30, max_delay=30, jitter=0)
    runner = asyncio.create_task(sup.run_forever())
    await _until(lambda: attempts == 1)
    sup.stop()
    await asyncio.wait_for(runner, 1)
    assert attempts == 1
    assert sup.sessions_started == 0


@pytest.mark.asyncio
async def test_unexpected_errors_propagate():
    async def factory() -> Connection:
        raise ValueError("bad config")

    sup = SessionSupervisor(factory, max_attempts=5, **FAST)
    with pytest.raises(ValueError):
        await asyncio.wait_for(sup.run_forever(), 2)


async def _never_called() -> Connection:
    raise AssertionError("factory should not run")


def test_backoff_doubles_and_caps():
    sup = SessionSupervisor(_never_called, base_delay=1, max_delay=5, jitter=0)
    wait = sup.backoff()
    delays = [wait(SimpleNamespace(attempt_number=n)) for n in range(1, 6)]
    assert delays == [1, 2, 4, 5, 5]


def test_backoff_jitter_stays_in_range():
    sup = SessionSupervisor(_never_called, base_delay=1, max_delay=60, jitter=0.5)
    wait = sup.backoff()
    for _ in range(20):
        assert 1 <= wait(SimpleNamespace(attempt_number=1)) <= 1.5


@pytest.mark.asyncio
async def test_retry_loop_emits_no_deprecation_warnings():
    async def factory() -> Connection:
        raise ConnectError("refused")

    sup = SessionSupervisor(factory, max_attempts=2, **FAST)
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        with pytest.raises(ReconnectExhaustedError):
            await asyncio.wait_for(sup.run_forever(), 2)
