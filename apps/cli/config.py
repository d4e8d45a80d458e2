from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from redis_repl.engine.connection import DEFAULT_HOSTNAME, DEFAULT_PORT, DEFAULT_TLS_PORT, ConnectionOptions


CONFIG_SCHEMA_VERSION = 1

ENV_HOSTNAME = "REDIS_HOSTNAME"
ENV_PORT = "REDIS_PORT"
ENV_PASSWORD = "REDIS_PASSWORD"
ENV_TLS = "REDIS_TLS"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"", "0", "false", "no", "off"}


class ConfigError(RuntimeError):
    pass


@dataclass
class CliConfig:
    """Connection defaults from the config file and the environment.

    Unset fields fall through to the next source (flag > env > file > built-in).
    """

    schema_version: int = CONFIG_SCHEMA_VERSION

    hostname: str | None = None
    port: int | None = None
    password: str | None = None
    tls: bool | None = None


def config_dir() -> Path:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config_home) if xdg_config_home else (Path.home() / ".config")
    return base / "redis-repl"


def config_path(*, base_dir: Path | None = None) -> Path:
    return (base_dir or config_dir()) / "config.json"


def history_path(*, base_dir: Path | None = None) -> Path:
    return (base_dir or config_dir()) / "history"


def _parse_port(value: Any, *, source: str) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid port {value!r} from {source}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"Port out of range {port} from {source}")
    return port


def _parse_bool(value: str, *, source: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"Invalid boolean {value!r} from {source}")


def load_config(*, path: Path | None = None) -> CliConfig:
    p = path or config_path()
    if not p.exists():
        return CliConfig()

    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Failed to read config file: {p}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a JSON object: {p}")

    version = raw.get("schema_version", 0)
    if version not in {0, CONFIG_SCHEMA_VERSION}:
        raise ConfigError(f"Unsupported config schema_version={version!r} in {p}")

    # Malformed fields are ignored rather than fatal.
    hostname = raw.get("hostname")
    if not isinstance(hostname, str) or not hostname:
        hostname = None

    port = raw.get("port")
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        port = None

    password = raw.get("password")
    if not isinstance(password, str) or not password:
        password = None

    tls = raw.get("tls")
    if not isinstance(tls, bool):
        tls = None

    return CliConfig(
        schema_version=CONFIG_SCHEMA_VERSION,
        hostname=hostname,
        port=port,
        password=password,
        tls=tls,
    )


def apply_env(config: CliConfig, environ: Mapping[str, str] | None = None) -> CliConfig:
    """Return `config` with any REDIS_* environment variables layered on top."""
    env = os.environ if environ is None else environ
    updates: dict[str, Any] = {}

    if env.get(ENV_HOSTNAME):
        updates["hostname"] = env[ENV_HOSTNAME]
    if env.get(ENV_PORT):
        updates["port"] = _parse_port(env[ENV_PORT], source=ENV_PORT)
    if env.get(ENV_PASSWORD):
        updates["password"] = env[ENV_PASSWORD]
    if ENV_TLS in env:
        updates["tls"] = _parse_bool(env[ENV_TLS], source=ENV_TLS)

    return replace(config, **updates)


def resolve_options(
    *,
    hostname: str | None,
    port: int | None,
    password: str | None,
    tls: bool | None,
    config: CliConfig,
) -> ConnectionOptions:
    """Merge command-line values over `config` and the built-in defaults."""
    use_tls = tls if tls is not None else bool(config.tls)

    if port is not None:
        resolved_port = _parse_port(port, source="--port")
    elif config.port is not None:
        resolved_port = config.port
    else:
        resolved_port = DEFAULT_TLS_PORT if use_tls else DEFAULT_PORT

    return ConnectionOptions(
        hostname=hostname or config.hostname or DEFAULT_HOSTNAME,
        port=resolved_port,
        password=password or config.password,
        tls=use_tls,
    )
