"""
Configuration Management.

Everything the notes server and its clients read at startup lives under
the project root, found by walking up to the `.project_root` marker:

    config/settings/application.yaml  identity, server, cors, timeouts,
                                      note defaults, client state file
    config/settings/database.yaml     SQLAlchemy URL and engine options
    config/settings/logging.yaml      level, format, handlers
    config/.env                       DATABASE_URL override (optional)

YAML files are validated against config_schema at load; the results are
cached for the life of the process.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from modules.backend.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    LoggingSchema,
)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

ROOT_MARKER = ".project_root"
ASYNC_DRIVER_PREFIXES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


def find_project_root(start: Path | None = None) -> Path:
    """First directory at or above `start` (default: cwd) holding the root marker."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ROOT_MARKER).exists():
            return candidate
    raise RuntimeError(f"Project root not found. Ensure {ROOT_MARKER} file exists.")


def validate_project_root() -> Path:
    """find_project_root for entry scripts: exits with a message instead of raising."""
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def project_path(*parts: str) -> Path:
    """Join config-relative paths (state file, log file, alembic.ini) onto the root."""
    return find_project_root().joinpath(*parts)


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Raw mapping from config/settings/<filename>; an empty file gives {}."""
    config_path = project_path("config", "settings", filename)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Environment overrides, read from config/.env and the process environment."""

    database_url: str | None = None

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type[SchemaT], filename: str) -> SchemaT:
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


class AppConfig:
    """The three validated settings files, loaded together."""

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._database = _load_validated(DatabaseSchema, "database.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        return self._application

    @property
    def database(self) -> DatabaseSchema:
        return self._database

    @property
    def logging(self) -> LoggingSchema:
        return self._logging


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(project_path("config", ".env")))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_database_url() -> str:
    """
    Resolve the database URL.

    DATABASE_URL from config/.env or the environment wins over database.yaml.
    Bare postgres:// URLs are rewritten to the asyncpg driver.
    """
    url = get_settings().database_url or get_app_config().database.url
    for prefix, async_prefix in ASYNC_DRIVER_PREFIXES.items():
        if url.startswith(prefix):
            return async_prefix + url[len(prefix):]
    return url


def get_server_base_url() -> tuple[str, float]:
    """(base_url, timeout_seconds) the notes client uses to reach the server."""
    app = get_app_config().application
    base_url = f"http://{app.server.host}:{app.server.port}"
    return base_url, float(app.timeouts.external_api)


def get_client_state_path() -> Path:
    """Where the editor remembers the open note between CLI invocations."""
    return project_path(get_app_config().application.client.state_file)
