"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Test Database Configuration:
    Tests use a fresh in-memory SQLite database per test. Foreign keys
    are switched on by ``Database`` so ON DELETE CASCADE behaves as in
    production.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.config import get_app_config
from modules.backend.core.config_schema import StorageSchema
from modules.backend.core.database import Database
from modules.backend.core.storage import FileStorage

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """
    Provide an isolated database with all tables created.

    Each test gets its own in-memory database, so no test can see
    another test's rows.
    """
    db = Database(TEST_DATABASE_URL)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session for a single test.

    Usage:
        async def test_save(db_session: AsyncSession):
            note = await NoteService(db_session).save_note("abc", "hello")
            assert note.id == "abc"
    """
    async with database.session() as session:
        yield session
        await session.rollback()


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def file_storage(upload_dir: Path) -> FileStorage:
    """Attachment storage rooted in a temporary directory."""
    storage = FileStorage(upload_dir)
    storage.ensure_root()
    return storage


@pytest.fixture
def storage_limits() -> StorageSchema:
    """Upload limits as configured in storage.yaml."""
    return get_app_config().storage


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
