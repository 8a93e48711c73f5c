#!/usr/bin/env python3
"""
Main entry point for the Twitch chat client
"""

import asyncio
import logging
import signal
import sys

from twitchchat.bot import ChatBot
from twitchchat.config import load_config
from twitchchat.errors import ConfigError, ReconnectExhaustedError
from twitchchat.logs.logger import configure_logging, logger
from twitchchat.supervisor import SessionSupervisor


def install_signal_handlers(supervisor: SessionSupervisor) -> None:  # pragma: no cover
    """Stop the supervisor on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()

    def handler(signum: int) -> None:
        logger.log_event("app", "signal", level=logging.WARNING, signal=signum)
        supervisor.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, handler, sig)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler.
            signal.signal(sig, lambda signum, _frame: handler(signum))


async def main() -> int:
    """Main function"""
    logger.log_event("app", "start")
    try:
        config = load_config()
    except ConfigError as e:
        logger.log_event("app", "config_error", level=logging.ERROR, error=str(e))
        return 1
    configure_logging(config.application.log_level)

    bot = ChatBot(config)
    supervisor = SessionSupervisor(bot.start_session)
    install_signal_handlers(supervisor)
    try:
        await supervisor.run_forever()
    except ReconnectExhaustedError as e:
        logger.log_event(
            "app", "reconnect_exhausted", level=logging.ERROR, attempts=e.attempts
        )
        return 1
    finally:
        logger.log_event("app", "shutdown")
    return 0


if __name__ == "__main__":
    # Simple health check mode
    if len(sys.argv) > 1 and sys.argv[1] == "--health-check":
        try:
            load_config()
        except ConfigError as e:
            logger.log_event("app", "config_error", level=logging.ERROR, error=str(e))
            sys.exit(1)
        sys.exit(0)

    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted", level=logging.WARNING)
        sys.exit(130)
