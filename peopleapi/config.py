"""Configuration management for the people service."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional

import yaml

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000
DEFAULT_TIMEOUT = 5.0


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _resolve_path(raw: str, base_path: Optional[Path]) -> Path:
    candidate = Path(raw).expanduser()
    if candidate.is_absolute() or base_path is None:
        return candidate.resolve(strict=False)
    return (base_path / candidate).resolve(strict=False)


def default_database_path() -> Path:
    return (_project_root() / "data" / "people.sqlite3").resolve(strict=False)


@dataclass(frozen=True)
class DatabaseSettings:
    """Location of the relational store backing the ``people`` table."""

    path: Path = field(default_factory=default_database_path)
    timeout: float = DEFAULT_TIMEOUT

    @staticmethod
    def from_dict(data: Dict[str, object], base_path: Path | None = None) -> "DatabaseSettings":
        raw_path = data.get("path")
        if raw_path is not None and not str(raw_path).strip():
            raise ValueError("database.path must not be empty")
        path = _resolve_path(str(raw_path), base_path) if raw_path is not None else default_database_path()

        try:
            timeout = float(data.get("timeout", DEFAULT_TIMEOUT))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError("database.timeout must be a number") from exc
        if timeout < 0:
            raise ValueError("database.timeout must not be negative")

        return DatabaseSettings(path=path, timeout=timeout)


@dataclass(frozen=True)
class ServerSettings:
    """Bind address for the HTTP listener."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "ServerSettings":
        host = str(data.get("host", DEFAULT_HOST)).strip()
        if not host:
            raise ValueError("server.host must not be empty")
        try:
            port = int(data.get("port", DEFAULT_PORT))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError("server.port must be an integer") from exc
        if not 1 <= port <= 65535:
            raise ValueError("server.port must be between 1 and 65535")
        return ServerSettings(host=host, port=port)


@dataclass(frozen=True)
class ServiceSettings:
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    server: ServerSettings = field(default_factory=ServerSettings)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (_project_root() / "config" / "people.yaml").resolve(strict=False)


def load_settings(config_path: Optional[Path] = None) -> ServiceSettings:
    """Load settings from YAML, falling back to defaults when the file is absent.

    ``PEOPLE_DB_PATH`` takes precedence over ``database.path`` from the file.
    """

    if config_path is None:
        config_path = resolve_config_path(os.getenv("PEOPLE_CONFIG_PATH"))

    raw: Dict[str, object] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        raw = loaded

    database_raw = raw.get("database")
    server_raw = raw.get("server")
    if database_raw is None:
        database_raw = {}
    if server_raw is None:
        server_raw = {}
    if not isinstance(database_raw, dict) or not isinstance(server_raw, dict):
        raise ValueError("The 'database' and 'server' sections must be mappings")

    database = DatabaseSettings.from_dict(database_raw, base_path=config_path.parent)
    env_db_path = os.getenv("PEOPLE_DB_PATH")
    if env_db_path:
        database = replace(database, path=_resolve_path(env_db_path, None))

    return ServiceSettings(database=database, server=ServerSettings.from_dict(server_raw))


__all__ = [
    "DatabaseSettings",
    "ServerSettings",
    "ServiceSettings",
    "default_database_path",
    "load_settings",
    "resolve_config_path",
]
