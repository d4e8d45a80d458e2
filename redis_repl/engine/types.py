"""Engine reply, handler and session types.

These types are shared by the registry, the connection and the loop.
They are independent of the terminal layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence


# A reply is whatever a command produced: None, a plain string, or a structured
# value (ints, lists, dicts nested arbitrarily) straight from the server.
Reply = Any

# Every command, remote or local, is called as handler(name, args) -> reply.
# Failures are raised and surface as the error half of the completion.
Handler = Callable[[str, Sequence[str]], Reply]


# Name a blank line resolves to; also registered as its own entry for lines
# whose first token is the empty string (e.g. `""`).
NOOP_COMMAND = "NOOP"
EMPTY_COMMAND = ""


@dataclass
class SessionContext:
    """State owned by one REPL session.

    `last_reply` is the single most recent reply (or None). Only the loop writes
    it; the SAVE meta-command reads it.
    """

    last_reply: Reply = None
