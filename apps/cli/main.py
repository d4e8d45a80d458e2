"""`redis-repl`: interactive client for Redis-protocol servers.

This is the CLI entrypoint. Run from source with:
  `python -m apps.cli.main --help`
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Sequence

from apps.cli.config import ConfigError, apply_env, load_config, resolve_options
from apps.cli.shell import run_shell
from redis_repl._version import __version__


PROG = "redis-repl"
DESCRIPTION = "Interactive command line for Redis-protocol servers"
LOG_LEVEL_ENV = "REDIS_REPL_LOG_LEVEL"


def build_parser() -> argparse.ArgumentParser:
    # -h is --hostname, so argparse's own -h/--help is replaced by -?/--help.
    p = argparse.ArgumentParser(prog=PROG, description=DESCRIPTION, add_help=False)
    p.add_argument(
        "-h",
        "--hostname",
        default=None,
        help="Server hostname (default: $REDIS_HOSTNAME or 127.0.0.1)",
    )
    p.add_argument(
        "-p",
        "--port",
        type=int,
        default=None,
        help="Server port (default: $REDIS_PORT, else 6379, or 6380 with --tls)",
    )
    p.add_argument(
        "-a",
        "--password",
        default=None,
        help="Password to AUTH with (default: $REDIS_PASSWORD)",
    )
    p.add_argument(
        "--tls",
        action="store_true",
        default=None,
        help="Connect over TLS (default: $REDIS_TLS)",
    )
    p.add_argument("-v", "--version", action="store_true", help="Print the version and exit")
    p.add_argument("-?", "--help", action="store_true", help="Print this help and exit")
    return p


def get_version() -> str:
    return f"{PROG} {__version__}"


def get_usage(parser: argparse.ArgumentParser) -> str:
    return f"{get_version()}\n\n{parser.format_help()}"


def _configure_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(None if argv is None else list(argv))

    if args.help:
        print(get_usage(parser))
        return 0
    if args.version:
        print(get_version())
        return 0

    _configure_logging()

    # Resolve connection options: flag > environment > config file > default
    try:
        config = apply_env(load_config())
        options = resolve_options(
            hostname=args.hostname,
            port=args.port,
            password=args.password,
            tls=args.tls,
            config=config,
        )
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    try:
        return run_shell(options)
    except KeyboardInterrupt:
        print()
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
