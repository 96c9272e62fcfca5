"""Configuration for the dashboard console."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigLoadError

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "fleet-console"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "console.yaml"

_LIMIT_FIELDS = ("global_history_limit", "agent_history_limit", "notice_limit")


@dataclass
class ConsoleConfig:
    """Connection and retention settings for the console."""

    server_url: str = "http://localhost:5000"
    socketio_path: str = "socket.io"
    global_history_limit: int = 100
    agent_history_limit: int = 50
    ignore_stale_updates: bool = True
    notice_limit: int = 20
    log_level: str = "WARNING"
    reconnection: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConsoleConfig:
        """Create config from dictionary (e.g., parsed YAML)."""
        console_data = data.get("console", data)
        if not isinstance(console_data, dict):
            raise ConfigLoadError("'console' must be a mapping")

        config = cls()
        config.server_url = str(console_data.get("server_url", config.server_url))
        config.socketio_path = str(console_data.get("socketio_path", config.socketio_path))
        config.ignore_stale_updates = bool(
            console_data.get("ignore_stale_updates", config.ignore_stale_updates)
        )
        config.log_level = str(console_data.get("log_level", config.log_level)).upper()
        config.reconnection = bool(console_data.get("reconnection", config.reconnection))
        for name in _LIMIT_FIELDS:
            if name in console_data:
                setattr(config, name, _positive_int(name, console_data[name]))
        return config

    @classmethod
    def from_yaml(cls, path: str | Path) -> ConsoleConfig:
        """Load config from YAML file."""
        path = Path(path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ConfigLoadError(f"config file must contain a YAML mapping: {path}")
        return cls.from_dict(data or {})

    @classmethod
    def load(
        cls,
        config_path: str | None = None,
        server_url: str | None = None,
    ) -> ConsoleConfig:
        """Load config with precedence: explicit path > env path > default file > defaults.

        Environment overrides (``FLEET_CONSOLE_URL``, ``FLEET_CONSOLE_LOG_LEVEL``)
        apply on top of the file, and an explicit ``server_url`` wins over all.
        """
        env_path = os.getenv("FLEET_CONSOLE_CONFIG")
        if config_path:
            config = cls.from_yaml(config_path)
        elif env_path:
            config = cls.from_yaml(env_path)
        elif DEFAULT_CONFIG_FILE.exists():
            config = cls.from_yaml(DEFAULT_CONFIG_FILE)
        else:
            config = cls()

        env_url = os.getenv("FLEET_CONSOLE_URL")
        if env_url:
            config.server_url = env_url
        env_level = os.getenv("FLEET_CONSOLE_LOG_LEVEL")
        if env_level:
            config.log_level = env_level.upper()
        if server_url:
            config.server_url = server_url
        return config


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigLoadError(f"{name} must be a positive integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigLoadError(f"{name} must be a positive integer, got {value!r}") from exc
    if number < 1:
        raise ConfigLoadError(f"{name} must be a positive integer, got {value!r}")
    return number
