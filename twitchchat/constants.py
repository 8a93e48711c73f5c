"""
Configuration constants for the Twitch chat client

This module contains the tunable constants used by the connection core and the
session supervisor. Each constant can be overridden by setting an environment
variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Server endpoint
TWITCH_IRC_HOST = os.getenv("TWITCH_IRC_HOST", "irc.chat.twitch.tv")
TWITCH_IRC_PORT = _get_env_int("TWITCH_IRC_PORT", 6667)
TWITCH_IRC_TLS_PORT = _get_env_int("TWITCH_IRC_TLS_PORT", 6697)

# Transport timeouts
IRC_CONNECT_TIMEOUT = _get_env_float(
    "IRC_CONNECT_TIMEOUT", 10.0
)  # Seconds allowed for TCP connect + TLS handshake
IRC_READ_TIMEOUT = _get_env_float(
    "IRC_READ_TIMEOUT", 1.0
)  # Seconds a single read may block before the loop re-checks shutdown
IRC_READ_CHUNK_SIZE = _get_env_int("IRC_READ_CHUNK_SIZE", 4096)
IRC_MAX_LINE_LENGTH = _get_env_int(
    "IRC_MAX_LINE_LENGTH", 16384
)  # Bytes an unterminated line may reach before it is dropped

# Heartbeat
KEEPALIVE_INTERVAL = _get_env_float(
    "KEEPALIVE_INTERVAL", 60.0
)  # Seconds between outbound PING lines

# Reconnection (supervisor only; the connection itself never retries)
RECONNECT_BASE_DELAY = _get_env_float("RECONNECT_BASE_DELAY", 1.0)
RECONNECT_MAX_DELAY = _get_env_float("RECONNECT_MAX_DELAY", 60.0)
RECONNECT_JITTER = _get_env_float("RECONNECT_JITTER", 1.0)
RECONNECT_MAX_ATTEMPTS = _get_env_int(
    "RECONNECT_MAX_ATTEMPTS", 0
)  # Attempts per outage, 0 = retry until stopped
