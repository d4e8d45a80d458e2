"""Connection lifecycle for the single server connection of a session.

States: CONNECTING -> READY -> (ERROR | CLOSED). The REPL is started on the first
entry into READY only; a connection failure is fatal for the process.
"""

from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, NoReturn, Sequence

import redis
from redis.backoff import NoBackoff
from redis.exceptions import AuthenticationError, RedisError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from .types import Reply
from .vocabulary import COMMANDS

logger = logging.getLogger(__name__)


DEFAULT_HOSTNAME = "127.0.0.1"
DEFAULT_PORT = 6379
DEFAULT_TLS_PORT = 6380


class ConnectionStateError(RuntimeError):
    pass


class ConnectionState(enum.Enum):
    CONNECTING = "connecting"
    READY = "ready"
    ERROR = "error"
    CLOSED = "closed"


_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.CONNECTING: frozenset(
        {ConnectionState.READY, ConnectionState.ERROR, ConnectionState.CLOSED}
    ),
    # READY -> READY is a reconnect.
    ConnectionState.READY: frozenset(
        {ConnectionState.READY, ConnectionState.ERROR, ConnectionState.CLOSED}
    ),
    ConnectionState.ERROR: frozenset(),
    ConnectionState.CLOSED: frozenset(),
}


@dataclass(frozen=True)
class ConnectionOptions:
    """Where and how to connect."""

    hostname: str = DEFAULT_HOSTNAME
    port: int = DEFAULT_PORT
    password: str | None = None
    tls: bool = False


def create_client(options: ConnectionOptions) -> Any:
    """Open one raw-reply redis connection for `options`."""
    client = redis.Redis(
        host=options.hostname,
        port=options.port,
        password=options.password,
        ssl=options.tls,
        decode_responses=True,
        encoding_errors="replace",
        single_connection_client=True,
        # One attempt only: a failed handshake or dropped socket is fatal, never retried.
        retry=Retry(NoBackoff(), 0),
        retry_on_error=[],
    )
    # No reply post-processing: the operator sees what the server sent.
    client.response_callbacks.clear()
    return client


class ConnectionManager:
    def __init__(
        self,
        options: ConnectionOptions,
        *,
        commands: Sequence[str] = COMMANDS,
        client_factory: Callable[[ConnectionOptions], Any] = create_client,
    ) -> None:
        self.options = options
        self._commands = tuple(commands)
        self._client_factory = client_factory
        self._client: Any = None
        self._state = ConnectionState.CONNECTING
        self._loop_started = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def commands(self) -> tuple[str, ...]:
        """Command vocabulary of the server, in enumeration order."""
        return self._commands

    def _transition(self, new_state: ConnectionState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            raise ConnectionStateError(
                f"Invalid connection transition: {self._state.value} -> {new_state.value}"
            )
        logger.debug("connection %s -> %s", self._state.value, new_state.value)
        self._state = new_state

    def mark_ready(self) -> bool:
        """Enter READY; return True only for the first READY of this connection."""
        self._transition(ConnectionState.READY)
        if self._loop_started:
            return False
        self._loop_started = True
        return True

    def connect(self, on_first_ready: Callable[[], int]) -> int:
        """
        Perform the handshake and hand control to `on_first_ready`.

        Args:
            on_first_ready: Started once, on the first successful handshake. Its
                return value is the process exit status.

        Returns:
            The status from `on_first_ready`, or 0 when the handshake was a
            reconnect and the loop is already running.
        """
        logger.debug(
            "connecting to %s:%s (tls=%s)", self.options.hostname, self.options.port, self.options.tls
        )
        try:
            if self._client is None:
                self._client = self._client_factory(self.options)
            # PING also runs AUTH when a password is configured.
            self._client.ping()
        except RedisError as exc:
            self.fail(exc)

        if not self.mark_ready():
            return 0
        return on_first_ready()

    def send_command(self, name: str, args: Sequence[str]) -> Reply:
        """Execute `name args...` on the server and return the raw reply."""
        if self._state is not ConnectionState.READY:
            raise ConnectionStateError(f"Cannot send {name}: connection is {self._state.value}")
        try:
            return self._client.execute_command(name, *args)
        except AuthenticationError:
            # A rejected interactive AUTH; the session itself is still usable.
            raise
        except (RedisConnectionError, RedisTimeoutError) as exc:
            self.fail(exc)

    def fail(self, exc: BaseException) -> NoReturn:
        """Report a connection-level failure and terminate the process."""
        self._transition(ConnectionState.ERROR)
        print(str(exc), file=sys.stderr)
        raise SystemExit(1)

    def close(self) -> None:
        """Release the connection without waiting for outstanding replies."""
        self._transition(ConnectionState.CLOSED)
        if self._client is not None:
            self._client.close()
            self._client = None
