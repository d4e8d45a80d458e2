from __future__ import annotations

import atexit
from pathlib import Path
from typing import Any, Callable

# Enable readline for arrow keys, history navigation, and line editing.
try:
    import readline
except ImportError:
    readline = None  # type: ignore[assignment]  # Windows fallback

from apps.cli.config import history_path
from redis_repl.engine.connection import ConnectionManager, ConnectionOptions, create_client
from redis_repl.engine.registry import build_registry
from redis_repl.engine.repl import Repl
from redis_repl.engine.types import SessionContext


def _setup_readline_history(history_file: Path) -> None:
    """Set up persistent command history for the REPL."""
    if readline is None:
        return
    history_file.parent.mkdir(parents=True, exist_ok=True)
    try:
        readline.read_history_file(history_file)
    except FileNotFoundError:
        pass
    readline.set_history_length(1000)
    atexit.register(readline.write_history_file, history_file)


def run_shell(
    options: ConnectionOptions,
    *,
    read_line: Callable[[str], str] = input,
    client_factory: Callable[[ConnectionOptions], Any] = create_client,
    history_file: Path | None = None,
    persist_history: bool = True,
) -> int:
    """Connect to the server and run the REPL once it is ready.

    Returns the exit status: 0 on end of input. QUIT/EXIT and connection
    failures leave through SystemExit.
    """
    if persist_history:
        _setup_readline_history(history_file or history_path())

    connection = ConnectionManager(options, client_factory=client_factory)
    context = SessionContext()
    repl = Repl(
        build_registry(connection, context),
        context=context,
        hostname=options.hostname,
        read_line=read_line,
    )
    return connection.connect(repl.run)
