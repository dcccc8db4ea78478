"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching real databases.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    Usage:
        def test_service(mock_db_session: AsyncMock):
            service = NoteService(mock_db_session)
    """
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    session.get = AsyncMock()
    return session


# =============================================================================
# Model Fixtures
# =============================================================================


def make_note(**overrides: Any) -> MagicMock:
    """Build a Note-like object with sensible defaults."""
    note = MagicMock()
    note.id = overrides.get("id", "abc")
    note.content = overrides.get("content", "hello")
    note.password_hash = overrides.get("password_hash")
    note.is_encrypted = overrides.get("is_encrypted", note.password_hash is not None)
    note.monospace = overrides.get("monospace", False)
    note.caret = overrides.get("caret", 0)
    note.url = overrides.get("url")
    return note


@pytest.fixture
def note_factory():
    """Provide the make_note helper."""
    return make_note


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.get_logger", return_value=mock_logger):
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
