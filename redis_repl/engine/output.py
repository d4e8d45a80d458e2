from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console

from .types import Reply


def parse_json_reply(text: str) -> Any | None:
    """Return the decoded value if `text` is a JSON object or array, else None.

    Bare scalars ("42", "true", '"x"') stay plain text.
    """
    stripped = text.strip()
    if not stripped or stripped[0] not in "[{":
        return None
    try:
        value = json.loads(stripped)
    except ValueError:
        return None
    if isinstance(value, (dict, list)):
        return value
    return None


def print_json(obj: Any, *, console: Console | None = None) -> None:
    console = console or Console()
    try:
        console.print_json(data=obj, indent=2, default=str)
    except (TypeError, ValueError):
        # Circular or otherwise unencodable structures.
        console.print(repr(obj), markup=False, highlight=False, soft_wrap=True)


def render_reply(reply: Reply, *, console: Console | None = None) -> None:
    """Write `reply` to stdout for a human.

    Strings holding a JSON document are pretty-printed like structured replies;
    other strings are printed verbatim. None produces no output.
    """
    if reply is None:
        return

    if isinstance(reply, str):
        parsed = parse_json_reply(reply)
        if parsed is None:
            print(reply, file=console.file if console is not None else sys.stdout)
            return
        reply = parsed

    print_json(reply, console=console)
