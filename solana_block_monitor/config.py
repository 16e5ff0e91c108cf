"""Configuration loaded from a ``.env`` file and the process environment."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from solana_block_monitor.metrics import TRACE

DEFAULT_ENV_FILE = ".env"

_UNSIGNED = re.compile(r"\+?[0-9]+")
_U16_MAX = 2**16 - 1
_U64_MAX = 2**64 - 1

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded."""


class ConfigFileNotFoundError(ConfigError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")
        self.path = path


class ConfigParseError(ConfigError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Parse error: {detail}")
        self.detail = detail


class MissingVariableError(ConfigError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Missing required variable: {key}")
        self.key = key


def parse_env_line(line: str) -> tuple[str, str] | None:
    """Split a ``KEY=value`` line, dropping matching surrounding quotes.

    Returns None when the line has no ``=`` or an empty key.
    """
    key, sep, value = line.partition("=")
    if not sep:
        return None
    key = key.strip()
    value = value.strip()
    if not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value


def _parse_unsigned(name: str, raw: str, maximum: int) -> int:
    if not _UNSIGNED.fullmatch(raw):
        raise ConfigParseError(f"Invalid {name} value")
    value = int(raw)
    if value > maximum:
        raise ConfigParseError(f"Invalid {name} value")
    return value


@dataclass(frozen=True)
class Config:
    solana_rpc_url: str
    solana_rpc_key: str
    server_port: int
    log_level: str
    monitor_interval_ms: int
    monitoring_depth: int

    @classmethod
    def load_from_env_file(cls, path: str | os.PathLike[str]) -> Config:
        """Read ``KEY=value`` lines into the environment, then build a Config."""
        try:
            content = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigFileNotFoundError(str(path)) from exc
        except OSError as exc:
            raise ConfigError(f"IO error: {exc}") from exc

        for line_number, raw_line in enumerate(content.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            parsed = parse_env_line(line)
            if parsed is None:
                raise ConfigParseError(f"Invalid format at line {line_number}: {line}")
            key, value = parsed
            os.environ[key] = value

        return cls.from_environ()

    @classmethod
    def load(cls) -> Config:
        """Load from ``.env`` in the current directory."""
        return cls.load_from_env_file(DEFAULT_ENV_FILE)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> Config:
        """Build a Config from the given mapping, or from ``os.environ``."""
        env = os.environ if environ is None else environ

        def require(key: str) -> str:
            try:
                return env[key]
            except KeyError:
                raise MissingVariableError(key) from None

        solana_rpc_url = require("SOLANA_RPC_URL")
        solana_rpc_key = require("SOLANA_RPC_KEY")
        server_port = _parse_unsigned("SERVER_PORT", require("SERVER_PORT"), _U16_MAX)
        log_level = require("LOG_LEVEL")
        monitor_interval_ms = _parse_unsigned(
            "MONITOR_INTERVAL_MS", require("MONITOR_INTERVAL_MS"), _U64_MAX
        )
        monitoring_depth = _parse_unsigned(
            "MONITORING_DEPTH", require("MONITORING_DEPTH"), _U64_MAX
        )
        return cls(
            solana_rpc_url=solana_rpc_url,
            solana_rpc_key=solana_rpc_key,
            server_port=server_port,
            log_level=log_level,
            monitor_interval_ms=monitor_interval_ms,
            monitoring_depth=monitoring_depth,
        )

    @property
    def tracing_level(self) -> int:
        """The ``logging`` level named by ``log_level``; INFO when unknown."""
        return _LEVELS.get(self.log_level.lower(), logging.INFO)