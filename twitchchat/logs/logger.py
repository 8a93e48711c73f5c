"""Structured event logger with colored console output."""

from __future__ import annotations

import logging
import os
import sys

import colorlog

from .event_catalog import EVENT_TEMPLATES

_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def _debug_env() -> bool:
    return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")


def _build_formatter() -> colorlog.ColoredFormatter:
    return colorlog.ColoredFormatter(
        "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s "
        "%(message_log_color)s%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors=_LOG_COLORS,
        secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
        reset=True,
    )


class ChatLogger:
    """Emits ``<domain>_<action>`` events with a fixed-width user/channel column.

    Human readable text comes from the event template catalog; remaining
    keyword arguments are appended as ``key=value`` context in debug mode.
    """

    def __init__(self, name: str = "twitchchat") -> None:
        self._event_name_width = 32
        self.logger = logging.getLogger(name)
        self.logger.handlers.clear()
        self.logger.propagate = False
        self.logger.setLevel(logging.DEBUG if _debug_env() else logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(_build_formatter())
        self.logger.addHandler(console_handler)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def is_debug(self) -> bool:
        return self.logger.isEnabledFor(logging.DEBUG)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        event_name = f"{domain}_{action}".lower()
        human_text = human
        if human_text is None:
            template = EVENT_TEMPLATES.get((domain, action))
            if template:
                try:
                    human_text = template.format(**kwargs)
                except (KeyError, IndexError, ValueError):
                    human_text = template
            else:
                human_text = f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
                kwargs.setdefault("derived", True)
        self._log(level, event_name, human_text, exc_info=exc_info, **kwargs)

    def _log(
        self,
        level: int,
        event_name: str,
        human_text: str,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        kw: dict[str, object] = dict(kwargs)
        user_o = kw.pop("user", None)
        channel_o = kw.pop("channel", None)
        user = user_o if isinstance(user_o, str) else None
        channel = channel_o if isinstance(channel_o, str) else None
        prefix = self._build_prefix(user, channel)
        if self.is_debug():
            msg = self._build_debug_message(event_name, prefix, human_text, kw)
        else:
            msg = f"{prefix} {human_text}"
        self.logger.log(level, msg, exc_info=exc_info)

    @staticmethod
    def _build_prefix(user: str | None, channel: str | None) -> str:
        user_label = user or "system"
        core = f"{user_label}#{channel}" if channel else user_label
        padded = core.ljust(24)[:24]
        return f"[{padded}]"

    def _build_debug_message(
        self,
        event_name: str,
        prefix: str,
        human_text: str,
        kwargs: dict[str, object],
    ) -> str:
        context = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        width = self._event_name_width
        if len(event_name) <= width:
            ev = event_name.ljust(width)
        else:
            ev = event_name[: width - 1] + "…"
        base = f"{ev} {prefix} {human_text}"
        if context:
            base = f"{base} ({context})"
        return base


def configure_logging(level: str | int | None = None) -> None:
    """Apply a log level to the shared logger.

    ``DEBUG=true`` in the environment always wins over the configured level.
    """
    if _debug_env():
        logger.set_level(logging.DEBUG)
        return
    if isinstance(level, str):
        logger.set_level(_LEVELS.get(level.lower(), logging.INFO))
    elif isinstance(level, int):
        logger.set_level(level)


logger = ChatLogger()
