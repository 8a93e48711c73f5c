"""Project logging package.

Contains the event catalog and the ChatLogger used throughout the client.
"""

from .event_catalog import EVENT_TEMPLATES, load_event_templates  # noqa: F401
from .logger import ChatLogger, configure_logging, logger  # noqa: F401

__all__ = [
    "ChatLogger",
    "logger",
    "configure_logging",
    "EVENT_TEMPLATES",
    "load_event_templates",
]
