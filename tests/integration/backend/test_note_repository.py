"""
Integration Tests for the Note Repository.

Runs against a file-backed SQLite database so that separate sessions use
separate connections, as concurrent requests do.
"""

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from modules.backend.core.database import Database
from modules.backend.models.note import Note
from modules.backend.repositories.note import NoteRepository
from modules.backend.services.note import NoteService


@pytest.fixture
async def file_database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}")
    await database.create_all()
    yield database
    await database.dispose()


async def _save(database: Database, note_id: str, content: str) -> Note:
    async with database.session() as session:
        note = await NoteService(session).save_note(note_id, content)
        await session.commit()
        return note


async def _row_count(database: Database) -> int:
    async with database.session() as session:
        return (await session.execute(select(func.count()).select_from(Note))).scalar_one()


class TestConcurrentSaves:
    """Two saves creating the same new note must not conflict."""

    @pytest.mark.asyncio
    async def test_insert_after_stale_existence_check_overwrites(self, file_database: Database):
        real_exists = NoteRepository.exists
        interleaved: list[str] = []

        async def stale_exists(repo, note_id):
            if interleaved:
                return await real_exists(repo, note_id)
            interleaved.append(note_id)
            await _save(file_database, note_id, "first")
            return False

        with patch.object(NoteRepository, "exists", stale_exists):
            note = await _save(file_database, "race", "second")

        assert note.content == "second"
        assert await _row_count(file_database) == 1

    @pytest.mark.asyncio
    async def test_overwrite_keeps_created_at(self, file_database: Database):
        first = await _save(file_database, "race", "first")

        with patch.object(NoteRepository, "exists", return_value=False):
            second = await _save(file_database, "race", "second")

        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at

    @pytest.mark.asyncio
    async def test_simultaneous_saves_last_write_wins(self, file_database: Database):
        results = await asyncio.gather(
            _save(file_database, "race", "one"),
            _save(file_database, "race", "two"),
            return_exceptions=True,
        )

        assert not [r for r in results if isinstance(r, Exception)]
        async with file_database.session() as session:
            stored = (await session.execute(select(Note).where(Note.id == "race"))).scalar_one()
        assert stored.content in {"one", "two"}
        assert await _row_count(file_database) == 1
