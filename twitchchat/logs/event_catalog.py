"""Human readable text for ``(domain, action)`` log events.

Templates live in ``event_templates.json`` next to this module, as
``{"domain": {"action": "text with {fields}"}}``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

TEMPLATES_FILE = Path(__file__).with_name("event_templates.json")


def load_event_templates(path: Path = TEMPLATES_FILE) -> dict[tuple[str, str], str]:
    """Flatten the template file into ``{(domain, action): template}``.

    A missing or unreadable file never breaks logging: the result then holds
    a single ``("app", "load_error")`` entry describing the problem, and every
    other event falls back to derived text.
    """
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {("app", "load_error"): f"Event templates file missing: {path.name}"}
    except (OSError, ValueError) as e:
        return {("app", "load_error"): f"Failed to load event templates: {e}"[:200]}

    if not isinstance(raw, dict):
        return {}
    return {
        (domain, action): template
        for domain, actions in raw.items()
        if isinstance(actions, dict)
        for action, template in actions.items()
        if isinstance(template, str)
    }


EVENT_TEMPLATES = load_event_templates()

__all__ = ["EVENT_TEMPLATES", "TEMPLATES_FILE", "load_event_templates"]
