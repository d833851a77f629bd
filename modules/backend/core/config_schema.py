"""
Configuration Schemas.

One strict Pydantic model per YAML file in config/settings/, validated when
AppConfig loads. A typo in a key, a missing key or an out-of-range value
stops startup with the offending field named.

    ApplicationSchema  -> application.yaml
    DatabaseSchema     -> database.yaml
    LoggingSchema      -> logging.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# notes.name is VARCHAR(255)
NAME_COLUMN_LENGTH = 255


class _StrictBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


# application.yaml


class ServerSchema(_StrictBase):
    host: str
    port: int = Field(ge=1, le=65535)


class CorsSchema(_StrictBase):
    origins: list[str]


class TimeoutsSchema(_StrictBase):
    """Seconds. `database` bounds the readiness probe, `external_api` the client."""

    database: int = Field(gt=0)
    external_api: int = Field(gt=0)


class NotesSchema(_StrictBase):
    """Defaults applied by NoteService when creating and renaming notes."""

    default_content: str
    max_name_length: int = Field(gt=0, le=NAME_COLUMN_LENGTH)


class ClientSchema(_StrictBase):
    # Relative to the project root; holds the editor's open note
    state_file: str


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: Literal["development", "test", "production"]
    debug: bool
    api_prefix: str = Field(pattern=r"^/")
    docs_enabled: bool
    server: ServerSchema
    cors: CorsSchema
    timeouts: TimeoutsSchema
    notes: NotesSchema
    client: ClientSchema


# database.yaml


class DatabaseSchema(_StrictBase):
    """Engine settings. The pool_* values are ignored for SQLite URLs."""

    url: str
    echo: bool
    create_tables_on_startup: bool
    pool_size: int = Field(ge=1)
    max_overflow: int = Field(ge=0)
    pool_timeout: int = Field(gt=0)
    pool_recycle: int


# logging.yaml


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int = Field(gt=0)
    backup_count: int = Field(ge=0)


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: LogLevel
    format: Literal["json", "console"]
    handlers: HandlersSchema
