"""
Unit tests for settings and YAML config loading.

Happy paths read the repository's own config/settings; broken configs
are written into a tmp_path project with its own .project_root.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from modules.backend.core.config import (
    AppConfig,
    Settings,
    find_project_root,
    get_app_config,
    get_database_url,
    get_server_base_url,
    get_settings,
    load_yaml_config,
    project_path,
    validate_project_root,
)
from modules.backend.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    LoggingSchema,
    NotesSchema,
)


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Both loaders are lru_cached; every test starts from disk."""
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


@pytest.fixture
def no_database_override(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)


# =============================================================================
# find_project_root
# =============================================================================


class TestFindProjectRoot:

    def test_finds_repository_root(self):
        root = find_project_root()
        assert (root / ".project_root").exists()
        assert (root / "config" / "settings").is_dir()

    def test_missing_marker_is_runtime_error(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(RuntimeError, match="Project root not found"):
            find_project_root()

    def test_walks_up_from_start_directory(self, tmp_path):
        (tmp_path / ".project_root").touch()
        nested = tmp_path / "modules" / "client"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == tmp_path.resolve()

    def test_project_path_joins_onto_root(self, tmp_path, monkeypatch):
        (tmp_path / ".project_root").touch()
        monkeypatch.chdir(tmp_path)

        assert project_path(".notes", "current-note.json") == (
            tmp_path.resolve() / ".notes" / "current-note.json"
        )

    def test_validate_exits_when_marker_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit):
            validate_project_root()


# =============================================================================
# load_yaml_config
# =============================================================================


class TestLoadYamlConfig:

    @pytest.mark.parametrize("filename", ["application.yaml", "database.yaml", "logging.yaml"])
    def test_loads_every_settings_file(self, filename):
        data = load_yaml_config(filename)
        assert isinstance(data, dict)
        assert data

    def test_missing_file_is_file_not_found(self):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_yaml_config("does_not_exist.yaml")

    def test_empty_yaml_loads_as_empty_dict(self, tmp_path, monkeypatch):
        (tmp_path / ".project_root").touch()
        settings_dir = tmp_path / "config" / "settings"
        settings_dir.mkdir(parents=True)
        (settings_dir / "empty.yaml").write_text("")
        monkeypatch.chdir(tmp_path)

        assert load_yaml_config("empty.yaml") == {}


# =============================================================================
# AppConfig (validated YAML)
# =============================================================================


class TestAppConfig:

    def test_sections_are_typed(self):
        config = AppConfig()
        assert isinstance(config.application, ApplicationSchema)
        assert isinstance(config.database, DatabaseSchema)
        assert isinstance(config.logging, LoggingSchema)

    def test_note_defaults(self):
        notes = AppConfig().application.notes
        assert isinstance(notes, NotesSchema)
        assert notes.default_content == "This is a new note"
        assert notes.max_name_length == 255

    def test_api_is_mounted_under_api(self):
        assert AppConfig().application.api_prefix == "/api"

    def test_client_state_file_is_relative(self):
        assert not AppConfig().application.client.state_file.startswith("/")

    def test_incomplete_application_yaml_is_invalid(self, tmp_path, monkeypatch):
        (tmp_path / ".project_root").touch()
        settings_dir = tmp_path / "config" / "settings"
        settings_dir.mkdir(parents=True)
        (settings_dir / "application.yaml").write_text("name: 'Incomplete'")
        (settings_dir / "database.yaml").write_text("url: 'sqlite+aiosqlite:///x.db'")
        (settings_dir / "logging.yaml").write_text("level: INFO")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            AppConfig()

    def test_rejects_unknown_fields(self):
        data = load_yaml_config("application.yaml")
        data["unknown_field"] = "oops"
        with pytest.raises(PydanticValidationError, match="Extra inputs are not permitted"):
            ApplicationSchema(**data)

    def test_name_length_cannot_exceed_column(self):
        with pytest.raises(PydanticValidationError, match="max_name_length"):
            NotesSchema(default_content="", max_name_length=256)

    def test_rejects_out_of_range_port(self):
        data = load_yaml_config("application.yaml")
        data["server"]["port"] = 0
        with pytest.raises(PydanticValidationError, match="port"):
            ApplicationSchema(**data)

    def test_rejects_unknown_log_format(self):
        data = load_yaml_config("logging.yaml")
        data["format"] = "xml"
        with pytest.raises(PydanticValidationError, match="format"):
            LoggingSchema(**data)


class TestCachedAccessors:

    def test_settings_cached(self):
        assert isinstance(get_settings(), Settings)
        assert get_settings() is get_settings()

    def test_app_config_cached(self):
        assert get_app_config() is get_app_config()


# =============================================================================
# URL builders
# =============================================================================


class TestGetDatabaseUrl:

    def test_defaults_to_yaml_url(self, no_database_override):
        assert get_database_url() == get_app_config().database.url

    def test_environment_overrides_yaml(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///other.db")
        assert get_database_url() == "sqlite+aiosqlite:///other.db"

    @pytest.mark.parametrize(
        "raw",
        ["postgres://u:p@db/notes", "postgresql://u:p@db/notes"],
    )
    def test_postgres_urls_use_asyncpg(self, monkeypatch, raw):
        monkeypatch.setenv("DATABASE_URL", raw)
        assert get_database_url() == "postgresql+asyncpg://u:p@db/notes"


class TestGetServerBaseUrl:

    def test_url_and_timeout(self):
        base_url, timeout = get_server_base_url()
        server = get_app_config().application.server
        assert base_url == f"http://{server.host}:{server.port}"
        assert isinstance(timeout, float)
        assert timeout > 0
