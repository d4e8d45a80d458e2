from __future__ import annotations

import logging
import sys
from typing import Callable, Sequence

from redis.exceptions import RedisError

from .output import render_reply
from .registry import HELP_COMMAND, CommandError, CommandRegistry
from .tokenizer import tokenize
from .types import NOOP_COMMAND, Handler, Reply, SessionContext

logger = logging.getLogger(__name__)


# Errors reported for the one command that raised them; the loop keeps going.
DISPATCH_ERRORS = (CommandError, RedisError, OSError)


class Repl:
    """Reads command lines, dispatches them and prints the replies.

    One command is in flight at a time: the next prompt is only shown after the
    current handler returned (or raised) and its completion ran.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        *,
        context: SessionContext,
        hostname: str,
        read_line: Callable[[str], str] = input,
        render: Callable[[Reply], None] = render_reply,
    ) -> None:
        self._registry = registry
        self._context = context
        self._read_line = read_line
        self._render = render
        self.prompt = f"{hostname}> "

    @property
    def last_reply(self) -> Reply:
        return self._context.last_reply

    def resolve(self, tokens: Sequence[str]) -> tuple[str, list[str], Handler]:
        """Return (name, args, handler) for a tokenized line.

        Unknown names print a diagnostic and resolve to HELP without arguments.
        """
        name = tokens[0].upper() if tokens else NOOP_COMMAND
        args = list(tokens[1:])
        handler = self._registry.lookup(name)
        if handler is None:
            print(f"Unknown command '{name}', valid commands are:", file=sys.stderr)
            handler = self._registry[HELP_COMMAND]
            args = []
        return name, args, handler

    def dispatch(self, line: str) -> None:
        name, args, handler = self.resolve(tokenize(line))
        logger.debug("dispatch %s (%d args)", name, len(args))

        error: BaseException | None = None
        reply: Reply = None
        try:
            reply = handler(name, args)
        except DISPATCH_ERRORS as exc:
            error = exc
        self._complete(error, reply)

    def _complete(self, error: BaseException | None, reply: Reply) -> None:
        if error is not None:
            print(str(error), file=sys.stderr)
        if reply is not None:
            self._render(reply)
        self._context.last_reply = reply

    def run(self) -> int:
        """Prompt until end of input; returns the exit status."""
        while True:
            try:
                line = self._read_line(self.prompt)
            except EOFError:
                print()
                return 0
            except KeyboardInterrupt:
                print("^C")
                continue
            self.dispatch(line)
