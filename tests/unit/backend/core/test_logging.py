"""
Unit Tests for Centralized Logging.

Covers level and handler selection from LoggingSchema, argument
overrides, quieted third-party loggers, and source tagging.
"""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest

from modules.backend.core.config_schema import LoggingSchema
from modules.backend.core.logging import (
    QUIET_LOGGERS,
    VALID_SOURCES,
    _resolve_log_path,
    get_logger,
    log_with_source,
    setup_logging,
)


@pytest.fixture
def logging_settings():
    return LoggingSchema(
        level="INFO",
        format="json",
        handlers={
            "console": {"enabled": True},
            "file": {
                "enabled": False,
                "path": "logs/system.jsonl",
                "max_bytes": 1024,
                "backup_count": 1,
            },
        },
    )


@pytest.fixture
def patched_settings(logging_settings):
    with patch(
        "modules.backend.core.logging._logging_settings",
        return_value=logging_settings,
    ):
        yield logging_settings


class TestValidSources:

    def test_contains_client_and_cli(self):
        assert {"web", "cli", "client", "api", "internal"} <= VALID_SOURCES
        assert isinstance(VALID_SOURCES, frozenset)


class TestSetupLogging:

    def test_uses_configured_level_by_default(self, patched_settings):
        setup_logging()

        assert logging.getLogger().level == logging.INFO

    def test_override_takes_precedence(self, patched_settings):
        setup_logging(level="DEBUG", format_type="console")

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_raises(self, patched_settings):
        with pytest.raises(AttributeError):
            setup_logging(level="LOUD")

    def test_console_handler_only(self, patched_settings):
        setup_logging()

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)

    def test_console_disabled(self, patched_settings):
        setup_logging(enable_console=False)

        assert logging.getLogger().handlers == []

    def test_file_handler_when_enabled(self, patched_settings, tmp_path):
        log_file = tmp_path / "logs" / "system.jsonl"

        with patch("modules.backend.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(enable_console=False, enable_file_logging=True)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert handlers[0].maxBytes == 1024
        assert log_file.parent.is_dir()

        for handler in handlers:
            handler.close()

    def test_quiets_noisy_libraries(self, patched_settings):
        setup_logging(level="DEBUG")

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
        assert "aiosqlite" in QUIET_LOGGERS


class TestLogWithSource:

    def test_adds_source_field(self):
        logger = get_logger("test")
        mock_warning = MagicMock()

        with patch.object(logger, "warning", mock_warning):
            log_with_source(logger, "client", "warning", "Save failed", note_id=3)

        mock_warning.assert_called_once_with("Save failed", source="client", note_id=3)

    def test_invalid_level_raises(self):
        with pytest.raises(AttributeError):
            log_with_source(get_logger("test"), "cli", "loud", "Test")


class TestResolveLogPath:

    def test_relative_to_project_root(self, tmp_path):
        with patch("modules.backend.core.config.find_project_root", return_value=tmp_path):
            assert _resolve_log_path("logs/system.jsonl") == tmp_path / "logs" / "system.jsonl"
