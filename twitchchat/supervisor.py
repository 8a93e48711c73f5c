"""Keeps a chat session alive: reconnects with exponential backoff using Tenacity."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_any,
    stop_never,
    stop_when_event_set,
    wait_exponential,
    wait_random,
)
from tenacity.wait import wait_base

from .constants import (
    RECONNECT_BASE_DELAY,
    RECONNECT_JITTER,
    RECONNECT_MAX_ATTEMPTS,
    RECONNECT_MAX_DELAY,
)
from .errors import NetworkError, ReconnectExhaustedError
from .irc import Connection
from .logs.logger import logger

SessionFactory = Callable[[], Awaitable[Connection]]


class SessionSupervisor:
    """Runs sessions from ``session_factory`` until :meth:`stop` is called.

    A failed connect is retried with jittered exponential backoff; a session
    whose receive loop ends is closed and replaced.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        max_attempts: int = RECONNECT_MAX_ATTEMPTS,
        base_delay: float = RECONNECT_BASE_DELAY,
        max_delay: float = RECONNECT_MAX_DELAY,
        jitter: float = RECONNECT_JITTER,
    ) -> None:
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.connection: Connection | None = None
        self.sessions_started = 0
        self._stop_event = asyncio.Event()

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        if not self._stop_event.is_set():
            logger.log_event("supervisor", "stopping")
        self._stop_event.set()

    async def run_forever(self) -> None:
        """Run until stopped.

        Raises:
            ReconnectExhaustedError: ``max_attempts`` consecutive connects failed.
        """
        try:
            while not self.stopping:
                connection = await self._connect_with_retry()
                if connection is None:
                    break
                self.connection = connection
                self.sessions_started += 1
                logger.log_event("supervisor", "session_ready", user=connection.nickname)
                ended = await self._wait_session(connection)
                await connection.close()
                self.connection = None
                if ended:
                    logger.log_event(
                        "supervisor",
                        "session_ended",
                        level=logging.WARNING,
                        user=connection.nickname,
                    )
                    await self._sleep(self.base_delay)
        finally:
            if self.connection is not None:
                await self.connection.close()
                self.connection = None

    def backoff(self) -> wait_base:
        """Delay before retry n: base_delay * 2**(n-1), capped, plus up to jitter."""
        return wait_exponential(
            multiplier=self.base_delay, max=self.max_delay
        ) + wait_random(0, self.jitter)

    async def _connect_with_retry(self) -> Connection | None:
        stop = (
            stop_after_attempt(self.max_attempts) if self.max_attempts > 0 else stop_never
        )
        retrying = AsyncRetrying(
            stop=stop_any(stop, stop_when_event_set(self._stop_event)),
            wait=self.backoff(),
            retry=retry_if_exception_type(NetworkError),
            before_sleep=self._log_attempt_failed,
            sleep=self._sleep,
            reraise=True,
        )
        attempt_number = 0
        try:
            async for attempt in retrying:
                attempt_number = attempt.retry_state.attempt_number
                if self.stopping:
                    return None
                with attempt:
                    logger.log_event(
                        "supervisor",
                        "session_start",
                        level=logging.DEBUG,
                        attempt=attempt_number,
                    )
                    connection = await self.session_factory()
            return connection
        except NetworkError as e:
            if self.stopping:
                return None
            raise ReconnectExhaustedError(
                f"connection failed after {attempt_number} attempts",
                attempts=attempt_number,
                final_exception=e,
            ) from e

    async def _wait_session(self, connection: Connection) -> bool:
        """Block until the session dies (True) or a stop is requested (False)."""
        receive = asyncio.create_task(connection.wait_receive_stopped())
        stopper = asyncio.create_task(self._stop_event.wait())
        try:
            done, _ = await asyncio.wait(
                {receive, stopper}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (receive, stopper):
                task.cancel()
        return receive in done and not self.stopping

    async def _sleep(self, seconds: float) -> None:
        # Backoff waits end early when a stop is requested.
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except TimeoutError:
            pass

    @staticmethod
    def _log_attempt_failed(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        logger.log_event(
            "supervisor",
            "attempt_failed",
            level=logging.WARNING,
            attempt=retry_state.attempt_number,
            error=str(error),
            next_delay=retry_state.next_action.sleep if retry_state.next_action else None,
        )
