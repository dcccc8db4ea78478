"""
Unit Tests for Centralized Logging.

Tests the logging configuration, structured fields, and source handling.
"""

import json
import logging
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import structlog

from modules.backend.core.config_schema import LoggingSchema
from modules.backend.core.logging import (
    VALID_SOURCES,
    get_logger,
    log_with_source,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    """Put the root logger and structlog back the way they were."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


def _config(tmp_path, file_enabled=True, console_enabled=False):
    schema = LoggingSchema(
        level="INFO",
        format="json",
        handlers={
            "console": {"enabled": console_enabled},
            "file": {
                "enabled": file_enabled,
                "path": str(tmp_path / "logs" / "system.jsonl"),
                "max_bytes": 1024 * 1024,
                "backup_count": 1,
            },
        },
    )
    return SimpleNamespace(logging=schema)


class TestValidSources:
    """Tests for VALID_SOURCES constant."""

    def test_contains_notepad_sources(self):
        assert VALID_SOURCES == frozenset({"web", "client", "cli", "internal", "unknown"})


@pytest.mark.usefixtures("restore_logging")
class TestSetupLogging:
    """Tests for setup_logging handler wiring."""

    def test_file_handler_writes_json_lines(self, tmp_path):
        with patch("modules.backend.core.logging.get_app_config", return_value=_config(tmp_path)):
            setup_logging()

        get_logger("tests.logging").info("Note saved", note_id="abc")
        for handler in logging.getLogger().handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "system.jsonl"
        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        record = next(r for r in records if r["event"] == "Note saved")
        assert record["note_id"] == "abc"
        assert record["level"] == "info"
        assert record["logger"] == "tests.logging"
        assert "timestamp" in record

    def test_level_override(self, tmp_path):
        with patch("modules.backend.core.logging.get_app_config", return_value=_config(tmp_path)):
            setup_logging(level="WARNING")

        assert logging.getLogger().level == logging.WARNING

    def test_no_handlers_when_both_disabled(self, tmp_path):
        config = _config(tmp_path, file_enabled=False, console_enabled=False)
        with patch("modules.backend.core.logging.get_app_config", return_value=config):
            setup_logging()

        assert logging.getLogger().handlers == []
        assert not (tmp_path / "logs").exists()

    def test_noisy_libraries_are_quieted(self, tmp_path):
        with patch("modules.backend.core.logging.get_app_config", return_value=_config(tmp_path)):
            setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestLogWithSource:
    """Tests for log_with_source."""

    def test_passes_source_and_fields(self):
        logger = MagicMock()

        log_with_source(logger, "client", "warning", "Auto-save failed", note_id="abc")

        logger.warning.assert_called_once_with("Auto-save failed", source="client", note_id="abc")

    def test_invalid_level_raises(self):
        with pytest.raises(AttributeError):
            log_with_source(object(), "client", "loud", "message")
