"""Centralized error hierarchy for the chat client.

Classes:
  InternalError           – Base for all internal errors.
  ConfigError             – Missing or invalid configuration file.
  NetworkError            – Transport level failures.
  ConnectError            – Transport or TLS handshake could not be established.
  FatalReadError          – Non-transient read failure; ends the receive loop.
  WriteError              – A line could not be written to the transport.
  ReconnectExhaustedError – The supervisor ran out of connection attempts.

Read timeouts are the transient case and never surface as exceptions.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class ConfigError(InternalError):
    """Raised when the settings file is missing, unreadable or invalid."""


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors."""


class ConnectError(NetworkError):
    """The transport could not be opened or the TLS handshake failed.

    Fatal to the open attempt. The connection core never retries; callers
    that want reconnection layer it above (see ``SessionSupervisor``).
    """


class FatalReadError(NetworkError):
    """A read failed for a reason other than a timeout."""


class WriteError(NetworkError):
    """A line could not be written because the transport failed or is closed."""


class ReconnectExhaustedError(InternalError):
    """Raised by the supervisor once every reconnection attempt has failed."""

    def __init__(
        self, message: str, attempts: int, final_exception: BaseException | None = None
    ) -> None:
        super().__init__(message, data={"attempts": attempts})
        self.attempts = attempts
        self.final_exception = final_exception


__all__ = [
    "InternalError",
    "ConfigError",
    "NetworkError",
    "ConnectError",
    "FatalReadError",
    "WriteError",
    "ReconnectExhaustedError",
]
