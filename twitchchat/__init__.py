"""Twitch chat client: persistent IRC connection, parser and handler dispatch."""

__version__ = "0.1.0"
