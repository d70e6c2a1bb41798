"""
config.py
=========
Service configuration, built from an environment snapshot.

  PORT              main server port         (default 8080)
  PORT_APP          application server port  (default 4242)
  BIND_ADDRESS      shared bind address      (default 0.0.0.0)
  LOG_LEVEL         log level                (default info)
  SHUTDOWN_TIMEOUT  graceful shutdown, secs  (default 5)

load_config() only reads the mapping it is given. The entry point loads
.env and snapshots os.environ once, then passes the result around.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from simple_api.core.errors import EnvironmentVariableError

# ─────────────────────────────
# Defaults
# ─────────────────────────────
DEFAULT_MAIN_PORT = 8080
DEFAULT_APP_PORT = 4242
DEFAULT_BIND_ADDRESS = "0.0.0.0"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_SHUTDOWN_TIMEOUT = 5

MIN_PORT = 1
MAX_PORT = 65535
MAX_SHUTDOWN_TIMEOUT = 3600

# Same names uvicorn accepts for its log_level
LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


class Config(BaseModel):
    """Immutable settings for one process lifetime."""

    model_config = ConfigDict(frozen=True)

    main_port: int = Field(DEFAULT_MAIN_PORT, ge=MIN_PORT, le=MAX_PORT)
    app_port: int = Field(DEFAULT_APP_PORT, ge=MIN_PORT, le=MAX_PORT)
    bind_address: str = DEFAULT_BIND_ADDRESS
    log_level: str = DEFAULT_LOG_LEVEL
    shutdown_timeout: int = Field(DEFAULT_SHUTDOWN_TIMEOUT, ge=0, le=MAX_SHUTDOWN_TIMEOUT)


# ─────────────────────────────
# Parsing helpers
# ─────────────────────────────

def _parse_unsigned(var_name: str, raw: str, low: int, high: int, what: str) -> int:
    # int() would also accept "+80", " 80" and "8_0"
    if not (raw.isascii() and raw.isdigit()):
        raise EnvironmentVariableError(
            var_name, f"must be a valid {what} ({low}-{high}), got: {raw!r}"
        )
    value = int(raw)
    if not low <= value <= high:
        raise EnvironmentVariableError(
            var_name, f"must be a valid {what} ({low}-{high}), got: {raw!r}"
        )
    return value


def parse_port(environ: Mapping[str, str], var_name: str, default: int) -> int:
    """Read a port from environ, falling back to default when unset."""
    raw = environ.get(var_name)
    if raw is None:
        return default
    return _parse_unsigned(var_name, raw, MIN_PORT, MAX_PORT, "port number")


def parse_log_level(environ: Mapping[str, str], var_name: str = "LOG_LEVEL") -> str:
    raw = environ.get(var_name)
    if raw is None:
        return DEFAULT_LOG_LEVEL
    level = raw.strip().lower()
    if level not in LOG_LEVELS:
        raise EnvironmentVariableError(
            var_name, f"must be one of {', '.join(LOG_LEVELS)}, got: {raw!r}"
        )
    return level


# ─────────────────────────────
# Loader
# ─────────────────────────────

def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Build a Config from an environment snapshot.

    - environ defaults to a copy of os.environ taken at call time
    - unset variables take their documented defaults
    - a set but malformed or out-of-range value raises
      EnvironmentVariableError naming the variable
    - BIND_ADDRESS is taken as-is; a bad address fails later, at bind time
    """
    if environ is None:
        environ = dict(os.environ)

    raw_timeout = environ.get("SHUTDOWN_TIMEOUT")
    shutdown_timeout = (
        DEFAULT_SHUTDOWN_TIMEOUT
        if raw_timeout is None
        else _parse_unsigned(
            "SHUTDOWN_TIMEOUT", raw_timeout, 0, MAX_SHUTDOWN_TIMEOUT, "timeout in seconds"
        )
    )

    return Config(
        main_port=parse_port(environ, "PORT", DEFAULT_MAIN_PORT),
        app_port=parse_port(environ, "PORT_APP", DEFAULT_APP_PORT),
        bind_address=environ.get("BIND_ADDRESS", DEFAULT_BIND_ADDRESS),
        log_level=parse_log_level(environ),
        shutdown_timeout=shutdown_timeout,
    )
