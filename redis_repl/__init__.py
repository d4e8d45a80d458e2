"""
redis-repl - Interactive command-line client for Redis-protocol servers.

This package provides the REPL engine behind the `redis-repl` command: line
tokenization, command-table dispatch, connection lifecycle and reply rendering.

Quick Start:
    from redis_repl import ConnectionManager, ConnectionOptions, Repl, SessionContext, build_registry

    manager = ConnectionManager(ConnectionOptions(hostname="127.0.0.1", port=6379))
    context = SessionContext()
    repl = Repl(build_registry(manager, context), context=context, hostname="127.0.0.1")
    raise SystemExit(manager.connect(repl.run))

Submodules:
    - redis_repl.engine.tokenizer: Shell-like line splitting
    - redis_repl.engine.registry: Command table and local meta-commands
    - redis_repl.engine.output: Reply rendering
    - redis_repl.engine.connection: Connection state machine
    - redis_repl.engine.repl: The read-eval-print loop

Environment Variables:
    REDIS_REPL_LOG_LEVEL: Logging level for the CLI (default: WARNING)
"""

from redis_repl._version import __version__

from redis_repl.engine.connection import (
    ConnectionManager,
    ConnectionOptions,
    ConnectionState,
    ConnectionStateError,
)
from redis_repl.engine.output import render_reply
from redis_repl.engine.registry import CommandError, CommandRegistry, build_registry
from redis_repl.engine.repl import Repl
from redis_repl.engine.tokenizer import tokenize
from redis_repl.engine.types import Reply, SessionContext

__all__ = [
    "__version__",
    "CommandError",
    "CommandRegistry",
    "ConnectionManager",
    "ConnectionOptions",
    "ConnectionState",
    "ConnectionStateError",
    "Reply",
    "Repl",
    "SessionContext",
    "build_registry",
    "render_reply",
    "tokenize",
]
