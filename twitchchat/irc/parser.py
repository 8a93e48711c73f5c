"""IRC line parsing."""

from __future__ import annotations

from .models import Message, MessageContext


def parse_message(line: str) -> Message:
    """Parse one protocol line into a :class:`Message`.

    Never raises: malformed or truncated input yields a message with empty
    fields instead.
    """
    line = line.rstrip("\r\n")
    if not line.strip(": "):
        return Message()

    tags = ""
    rest = line
    if rest.startswith("@"):
        tags, _, rest = rest.partition(" ")
        rest = rest.lstrip(" ")

    if not rest.startswith(":"):
        return _parse_bare_command(tags, rest)

    parts = rest.split(":", 2)
    while len(parts) < 3:
        parts.append("")
    if not tags:
        tags = parts[0].strip()

    return Message(tags=tags, context=_parse_context(parts[1]), body=parts[2])


def _parse_bare_command(tags: str, rest: str) -> Message:
    # "PING :tmi.twitch.tv" and friends: no prefix, so no receiver either.
    command, _, sender = rest.partition(":")
    context = MessageContext(
        sender=sender.strip(), command=command.strip(), receiver="*"
    )
    return Message(tags=tags, context=context)


def _parse_context(middle: str) -> MessageContext:
    tokens = middle.split()
    tokens += [""] * (3 - len(tokens))
    sender = tokens[0].split("!", 1)[0]
    return MessageContext(sender=sender, command=tokens[1], receiver=tokens[2])
