"""Command registry.

Maps uppercase command names to handlers. Every name in the server vocabulary
forwards to the connection; a handful of meta-commands are served locally.
"""

from __future__ import annotations

import json
import locale
import logging
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterator, Mapping, Sequence

from .types import EMPTY_COMMAND, NOOP_COMMAND, Handler, Reply, SessionContext

if TYPE_CHECKING:
    from .connection import ConnectionManager

logger = logging.getLogger(__name__)


HELP_COMMAND = "HELP"


class CommandError(RuntimeError):
    pass


class CommandRegistry:
    """Read-only table of command handlers keyed by uppercase name."""

    def __init__(self, handlers: Mapping[str, Handler]) -> None:
        self._handlers: Mapping[str, Handler] = MappingProxyType(dict(handlers))

    def lookup(self, name: str) -> Handler | None:
        """Return the handler for `name` (any case), or None if unregistered."""
        return self._handlers.get(name.upper())

    def __getitem__(self, name: str) -> Handler:
        return self._handlers[name.upper()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


class MetaCommands:
    """Handlers for commands answered without a round trip to the server."""

    def __init__(self, connection: ConnectionManager, context: SessionContext) -> None:
        self._connection = connection
        self._context = context

    def help(self, name: str, args: Sequence[str]) -> Reply:
        vocabulary = list(dict.fromkeys(command.upper() for command in self._connection.commands))
        if not args:
            return vocabulary
        needle = args[0].upper()
        return [command for command in vocabulary if needle in command]

    def noop(self, name: str, args: Sequence[str]) -> Reply:
        return None

    def quit(self, name: str, args: Sequence[str]) -> Reply:
        self._connection.close()
        raise SystemExit(0)

    def save(self, name: str, args: Sequence[str]) -> Reply:
        if len(args) != 1:
            raise CommandError("SAVE filename")
        reply = self._context.last_reply
        if reply is None:
            raise CommandError("No reply to save")

        if isinstance(reply, str):
            content = reply
        else:
            content = json.dumps(reply, ensure_ascii=False, separators=(",", ":"), default=str)

        # Encode first so a reply the locale cannot represent leaves any existing file intact.
        encoding = locale.getpreferredencoding(False)
        try:
            data = content.encode(encoding)
        except UnicodeEncodeError as exc:
            raise CommandError(f"Cannot save reply as {encoding}: {exc.reason} at position {exc.start}") from exc

        filename = args[0]
        Path(filename).write_bytes(data)
        logger.debug("saved %d chars to %s", len(content), filename)
        return f"Saved last reply to {filename}"


def build_registry(connection: ConnectionManager, context: SessionContext) -> CommandRegistry:
    """
    Build the command table for one session.

    Args:
        connection: Supplies the server vocabulary and executes remote commands.
        context: Session state the SAVE meta-command reads from.

    Returns:
        A registry holding the whole vocabulary plus the meta-commands. Meta-commands
        shadow server commands of the same name (SAVE, QUIT).
    """
    handlers: dict[str, Handler] = {}
    for command in connection.commands:
        handlers[command.upper()] = connection.send_command

    meta = MetaCommands(connection, context)
    handlers[EMPTY_COMMAND] = meta.noop
    handlers[HELP_COMMAND] = meta.help
    handlers[NOOP_COMMAND] = meta.noop
    handlers["EXIT"] = meta.quit
    handlers["QUIT"] = meta.quit
    handlers["SAVE"] = meta.save
    return CommandRegistry(handlers)
